import logging
from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from produto_api.repositories.produto_repository import ProdutoRepository, get_produto_repository
from produto_api.schemas.produto import (
    ErrorResponse,
    Produto,
    ProdutoCreate,
    ProdutoCreated,
    ProdutoUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/produtos", tags=["produtos"])

T_Repository = Annotated[ProdutoRepository, Depends(get_produto_repository)]


def _error(description: str, example: dict) -> dict:
    return {
        "model": ErrorResponse,
        "description": description,
        "content": {"application/json": {"example": example}},
    }


VALIDATION_RESPONSE = _error(
    "Validation failed",
    {"error": "validation failed", "details": [
        {"msg": "rating must be an integer between 1 and 5", "param": "rating", "location": "body"}
    ]},
)
NOT_FOUND_RESPONSE = _error("Product not found", {"error": "product not found"})


@router.get(
    "",
    response_model=list[Produto],
    summary="List products with pagination",
    responses={
        400: VALIDATION_RESPONSE,
        404: _error("No products found", {"error": "no products found"}),
        500: _error(
            "Error while querying products",
            {"error": "unexpected error while retrieving products", "details": "connection reset"},
        ),
    },
)
async def list_produtos(
    repository: T_Repository,
    page: Annotated[int, Query(ge=1, description="Page number (default 1)")] = 1,
    limit: Annotated[int, Query(ge=1, description="Items per page (default 10)")] = 10,
):
    return await repository.list_page(page, limit)


@router.get(
    "/{produto_id}",
    response_model=Produto,
    summary="Get a product by ID",
    responses={400: VALIDATION_RESPONSE, 404: NOT_FOUND_RESPONSE},
)
async def get_produto(produto_id: int, repository: T_Repository):
    return await repository.get(produto_id)


@router.post(
    "",
    status_code=HTTPStatus.CREATED,
    response_model=ProdutoCreated,
    summary="Create a new product",
    responses={
        400: _error(
            "Validation failed or duplicate description",
            {"error": "product with this description already exists"},
        ),
        500: _error(
            "Error while creating the product",
            {"error": "unexpected error while creating the product", "details": "database error"},
        ),
    },
)
async def create_produto(produto: ProdutoCreate, repository: T_Repository):
    created = await repository.create(produto.descricao, produto.rating)
    logger.info(f"Created produto id={created['id']}")
    return {"message": "product created successfully", "produto": created}


@router.put(
    "/{produto_id}",
    response_model=Produto,
    summary="Update a product by ID",
    responses={
        400: _error("Duplicate product data", {"error": "duplicate product data"}),
        404: NOT_FOUND_RESPONSE,
        500: _error(
            "Error while updating the product",
            {"error": "unexpected error while updating the product", "details": "database error"},
        ),
    },
)
async def update_produto(produto_id: int, produto: ProdutoUpdate, repository: T_Repository):
    return await repository.update(produto_id, produto.descricao, produto.rating)


@router.delete(
    "/{produto_id}",
    status_code=HTTPStatus.NO_CONTENT,
    summary="Delete a product by ID",
    responses={
        400: _error(
            "Product is referenced by other records",
            {"error": "cannot delete the product due to dependencies"},
        ),
        404: NOT_FOUND_RESPONSE,
        500: _error(
            "Error while deleting the product",
            {"error": "unexpected error while deleting the product", "details": "database error"},
        ),
    },
)
async def delete_produto(produto_id: int, repository: T_Repository):
    await repository.delete(produto_id)
    logger.info(f"Deleted produto id={produto_id}")
