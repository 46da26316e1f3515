"""
Data access for the produto table.
One parameterized statement per operation; store failures are classified
here and raised as AppException so routers never look at driver errors.
"""
import asyncio
import logging
from typing import Any

from fastapi import Depends

from produto_api.db.database import Database, get_db
from produto_api.errors import ErrorType, classify_db_error
from produto_api.exceptions import AppException

logger = logging.getLogger(__name__)

COLUMNS = "id, descricao, rating"

NOT_FOUND_MESSAGE = "product not found"
CONNECTION_REFUSED_MESSAGE = "database connection refused"
TIMEOUT_MESSAGE = "database request timed out"

# Per-operation messages for the error kinds an operation can produce
MESSAGES = {
    "list": {
        ErrorType.INTERNAL_ERROR: "unexpected error while retrieving products",
    },
    "get": {
        ErrorType.INTERNAL_ERROR: "unexpected error while retrieving the product",
    },
    "create": {
        ErrorType.DUPLICATE: "product with this description already exists",
        ErrorType.INTERNAL_ERROR: "unexpected error while creating the product",
    },
    "update": {
        ErrorType.DUPLICATE: "duplicate product data",
        ErrorType.INTERNAL_ERROR: "unexpected error while updating the product",
    },
    "delete": {
        ErrorType.DEPENDENCY: "cannot delete the product due to dependencies",
        ErrorType.INTERNAL_ERROR: "unexpected error while deleting the product",
    },
}


def pagination_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def to_app_exception(operation: str, exc: BaseException) -> AppException:
    """Map a raw store exception raised by ``operation`` to an AppException."""
    if isinstance(exc, asyncio.TimeoutError):
        return AppException(ErrorType.TIMEOUT, TIMEOUT_MESSAGE, str(exc) or None)

    error_type = classify_db_error(exc)
    if error_type == ErrorType.CONNECTION_REFUSED:
        return AppException(error_type, CONNECTION_REFUSED_MESSAGE)

    messages = MESSAGES[operation]
    if error_type not in messages:
        # A constraint kind this operation does not expect is still a server error
        error_type = ErrorType.INTERNAL_ERROR
    if error_type == ErrorType.INTERNAL_ERROR:
        return AppException(error_type, messages[error_type], str(exc))
    return AppException(error_type, messages[error_type])


class ProdutoRepository:
    def __init__(self, db: Database):
        self.db = db

    async def _query(self, operation: str, sql: str, params: dict) -> list[dict[str, Any]]:
        try:
            return await self.db.execute_query(sql, params)
        except Exception as e:
            logger.error(f"Database error ({operation}): {e}")
            raise to_app_exception(operation, e) from e

    async def _execute(self, operation: str, sql: str, params: dict) -> tuple[list[dict[str, Any]], int]:
        try:
            return await self.db.execute(sql, params)
        except Exception as e:
            logger.error(f"Database error ({operation}): {e}")
            raise to_app_exception(operation, e) from e

    async def list_page(self, page: int = 1, limit: int = 10) -> list[dict[str, Any]]:
        rows = await self._query(
            "list",
            f"SELECT {COLUMNS} FROM produto LIMIT :limit OFFSET :offset",
            {"limit": limit, "offset": pagination_offset(page, limit)},
        )
        if not rows:
            raise AppException(ErrorType.NOT_FOUND, "no products found")
        return rows

    async def get(self, produto_id: int) -> dict[str, Any]:
        rows = await self._query(
            "get",
            f"SELECT {COLUMNS} FROM produto WHERE id = :id",
            {"id": produto_id},
        )
        if not rows:
            raise AppException(ErrorType.NOT_FOUND, NOT_FOUND_MESSAGE)
        return rows[0]

    async def create(self, descricao: str, rating: int) -> dict[str, Any]:
        rows, _ = await self._execute(
            "create",
            f"INSERT INTO produto (descricao, rating) VALUES (:descricao, :rating) RETURNING {COLUMNS}",
            {"descricao": descricao, "rating": rating},
        )
        return rows[0]

    async def update(self, produto_id: int, descricao: str, rating: int) -> dict[str, Any]:
        rows, _ = await self._execute(
            "update",
            f"UPDATE produto SET descricao = :descricao, rating = :rating WHERE id = :id RETURNING {COLUMNS}",
            {"descricao": descricao, "rating": rating, "id": produto_id},
        )
        if not rows:
            raise AppException(ErrorType.NOT_FOUND, NOT_FOUND_MESSAGE)
        return rows[0]

    async def delete(self, produto_id: int) -> None:
        _, rowcount = await self._execute(
            "delete",
            "DELETE FROM produto WHERE id = :id",
            {"id": produto_id},
        )
        if rowcount == 0:
            raise AppException(ErrorType.NOT_FOUND, NOT_FOUND_MESSAGE)


def get_produto_repository(db: Database = Depends(get_db)) -> ProdutoRepository:
    return ProdutoRepository(db)
