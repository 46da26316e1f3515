import errno
from enum import Enum

from sqlalchemy.exc import DBAPIError


class ErrorType(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    DEPENDENCY = "dependency"
    CONNECTION_REFUSED = "connection_refused"
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    INTERNAL_ERROR = "internal_error"


# Map error types to HTTP status codes
ERROR_STATUS_MAP = {
    ErrorType.VALIDATION: 400,
    ErrorType.DUPLICATE: 400,
    ErrorType.DEPENDENCY: 400,
    ErrorType.NOT_FOUND: 404,
    ErrorType.RATE_LIMIT: 429,
    ErrorType.CONNECTION_REFUSED: 500,
    ErrorType.TIMEOUT: 500,
    ErrorType.INTERNAL_ERROR: 500,
}

# asyncio reports failed connects with these texts, with errno unset when
# several addresses were tried ("Multiple exceptions: ...")
CONNECTION_REFUSED_MARKERS = ("CONNECT CALL FAILED", "CONNECTION REFUSED", "ECONNREFUSED")

# PostgreSQL SQLSTATE codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def _is_connection_refused(exc: BaseException) -> bool:
    """Walk the exception chain looking for a refused connection."""
    seen = set()
    current = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        if isinstance(current, OSError) and current.errno == errno.ECONNREFUSED:
            return True
        if isinstance(current, OSError) and any(m in str(current).upper() for m in CONNECTION_REFUSED_MARKERS):
            return True
        orig = getattr(current, "orig", None)
        current = orig if isinstance(orig, BaseException) else (current.__cause__ or current.__context__)
    return False


def classify_db_error(exc: BaseException) -> ErrorType:
    """Classify a raw store exception into one of the known error kinds.

    PostgreSQL drivers expose the SQLSTATE on the wrapped DBAPI error
    (``sqlstate`` for asyncpg, ``pgcode`` for psycopg). SQLite only reports
    constraint failures through the message text.
    """
    if _is_connection_refused(exc):
        return ErrorType.CONNECTION_REFUSED

    if isinstance(exc, DBAPIError):
        orig = exc.orig
        code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if code == UNIQUE_VIOLATION:
            return ErrorType.DUPLICATE
        if code == FOREIGN_KEY_VIOLATION:
            return ErrorType.DEPENDENCY

        message = str(orig).upper()
        if "UNIQUE CONSTRAINT FAILED" in message:
            return ErrorType.DUPLICATE
        if "FOREIGN KEY CONSTRAINT FAILED" in message:
            return ErrorType.DEPENDENCY

    return ErrorType.INTERNAL_ERROR
