import asyncio

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from produto_api.errors import ErrorType, ERROR_STATUS_MAP, classify_db_error
from produto_api.exceptions import AppException, FIELD_MESSAGES, build_validation_details
from produto_api.repositories.produto_repository import to_app_exception


class FakePgError(Exception):
    """Stands in for the driver error SQLAlchemy wraps (asyncpg exposes sqlstate)."""

    def __init__(self, message: str, sqlstate: str):
        super().__init__(message)
        self.sqlstate = sqlstate


def integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO produto ...", {}, orig)


class TestClassifyDbError:

    def test_postgres_unique_violation(self):
        exc = integrity_error(FakePgError("duplicate key value", "23505"))
        assert classify_db_error(exc) == ErrorType.DUPLICATE

    def test_postgres_foreign_key_violation(self):
        exc = integrity_error(FakePgError("violates foreign key constraint", "23503"))
        assert classify_db_error(exc) == ErrorType.DEPENDENCY

    def test_sqlite_unique_violation(self):
        exc = integrity_error(Exception("UNIQUE constraint failed: produto.descricao"))
        assert classify_db_error(exc) == ErrorType.DUPLICATE

    def test_sqlite_foreign_key_violation(self):
        exc = integrity_error(Exception("FOREIGN KEY constraint failed"))
        assert classify_db_error(exc) == ErrorType.DEPENDENCY

    def test_connection_refused(self):
        assert classify_db_error(ConnectionRefusedError(111, "Connection refused")) == ErrorType.CONNECTION_REFUSED

    def test_wrapped_connection_refused(self):
        exc = OperationalError("SELECT 1", {}, ConnectionRefusedError(111, "Connection refused"))
        assert classify_db_error(exc) == ErrorType.CONNECTION_REFUSED

    def test_connection_refused_as_cause(self):
        try:
            try:
                raise ConnectionRefusedError(111, "Connection refused")
            except ConnectionRefusedError as e:
                raise RuntimeError("could not connect") from e
        except RuntimeError as e:
            assert classify_db_error(e) == ErrorType.CONNECTION_REFUSED

    def test_multiple_addresses_refused(self):
        # One failed connect per resolved address, errno unset on the aggregate
        exc = OSError(
            "Multiple exceptions: [Errno 111] Connect call failed ('::1', 5432, 0, 0), "
            "[Errno 111] Connect call failed ('127.0.0.1', 5432)"
        )
        assert exc.errno is None
        assert classify_db_error(exc) == ErrorType.CONNECTION_REFUSED

    def test_wrapped_multiple_addresses_refused(self):
        orig = OSError("Multiple exceptions: [Errno 111] Connect call failed ('127.0.0.1', 5432)")
        exc = OperationalError("SELECT 1", {}, orig)
        assert classify_db_error(exc) == ErrorType.CONNECTION_REFUSED

    def test_other_os_errors_are_internal(self):
        assert classify_db_error(OSError("Name or service not known")) == ErrorType.INTERNAL_ERROR

    def test_other_errors_are_internal(self):
        assert classify_db_error(ValueError("boom")) == ErrorType.INTERNAL_ERROR
        exc = OperationalError("SELECT 1", {}, Exception("no such table: produto"))
        assert classify_db_error(exc) == ErrorType.INTERNAL_ERROR

    def test_status_map(self):
        assert ERROR_STATUS_MAP[ErrorType.DUPLICATE] == 400
        assert ERROR_STATUS_MAP[ErrorType.DEPENDENCY] == 400
        assert ERROR_STATUS_MAP[ErrorType.NOT_FOUND] == 404
        assert ERROR_STATUS_MAP[ErrorType.CONNECTION_REFUSED] == 500
        assert ERROR_STATUS_MAP[ErrorType.INTERNAL_ERROR] == 500


class TestToAppException:

    def test_duplicate_on_create(self):
        exc = to_app_exception("create", integrity_error(FakePgError("dup", "23505")))
        assert exc.error_type == ErrorType.DUPLICATE
        assert exc.to_response() == {"error": "product with this description already exists"}

    def test_duplicate_on_update(self):
        exc = to_app_exception("update", integrity_error(FakePgError("dup", "23505")))
        assert exc.to_response() == {"error": "duplicate product data"}

    def test_foreign_key_on_delete(self):
        exc = to_app_exception("delete", integrity_error(FakePgError("fk", "23503")))
        assert exc.status_code == 400
        assert exc.to_response() == {"error": "cannot delete the product due to dependencies"}

    def test_unexpected_kind_for_operation_is_internal(self):
        exc = to_app_exception("create", integrity_error(FakePgError("fk", "23503")))
        assert exc.error_type == ErrorType.INTERNAL_ERROR
        assert exc.status_code == 500
        assert exc.details is not None

    def test_connection_refused(self):
        exc = to_app_exception("list", ConnectionRefusedError(111, "Connection refused"))
        assert exc.status_code == 500
        assert exc.to_response() == {"error": "database connection refused"}

    def test_timeout(self):
        exc = to_app_exception("get", asyncio.TimeoutError())
        assert exc.error_type == ErrorType.TIMEOUT
        assert exc.to_response() == {"error": "database request timed out"}

    def test_unknown_error_carries_details(self):
        exc = to_app_exception("list", RuntimeError("disk full"))
        assert exc.to_response() == {
            "error": "unexpected error while retrieving products",
            "details": "disk full",
        }


class TestValidationDetails:

    def test_body_fields(self):
        errors = [
            {"loc": ("body", "descricao"), "msg": "String should have at least 1 character", "type": "string_too_short"},
            {"loc": ("body", "rating"), "msg": "Input should be less than or equal to 5", "type": "less_than_equal"},
        ]
        assert build_validation_details(errors, FIELD_MESSAGES["POST"]) == [
            {"msg": "descricao is required and must be a non-empty string of at most 255 characters", "param": "descricao", "location": "body"},
            {"msg": "rating must be an integer between 1 and 5", "param": "rating", "location": "body"},
        ]

    def test_without_field_messages_uses_pydantic_message(self):
        errors = [{"loc": ("body", "rating"), "msg": "Input should be a valid integer", "type": "int_parsing"}]
        assert build_validation_details(errors) == [
            {"msg": "Input should be a valid integer", "param": "rating", "location": "body"},
        ]

    def test_unknown_field_keeps_pydantic_message(self):
        errors = [{"loc": ("query", "page"), "msg": "Input should be greater than or equal to 1", "type": "greater_than_equal"}]
        assert build_validation_details(errors) == [
            {"msg": "Input should be greater than or equal to 1", "param": "page", "location": "query"},
        ]

    def test_missing_body(self):
        errors = [{"loc": ("body",), "msg": "Field required", "type": "missing"}]
        assert build_validation_details(errors) == [
            {"msg": "Field required", "param": "body", "location": "body"},
        ]

    def test_one_entry_per_field(self):
        errors = [
            {"loc": ("body", "rating"), "msg": "a", "type": "x"},
            {"loc": ("body", "rating"), "msg": "b", "type": "y"},
        ]
        assert len(build_validation_details(errors)) == 1


def test_app_exception_without_details():
    exc = AppException(ErrorType.NOT_FOUND, "product not found")
    assert exc.status_code == 404
    assert exc.to_response() == {"error": "product not found"}
