"""SQLAlchemy → domain exception translation shared by the repositories."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from core.logging_config import get_logger
from domain.common.exceptions import QueryException, StorageConnectionException


logger = get_logger(__name__)


def describe_db_error(exc: BaseException) -> str:
    """Driver message without SQLAlchemy's statement/parameter dump."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


@contextmanager
def translate_db_errors(action: str) -> Iterator[None]:
    """Raise ``QueryException("<action>: <reason>")`` for any SQLAlchemy error.

    A connection dropped mid-operation is reported as
    ``StorageConnectionException`` instead.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        reason = describe_db_error(exc)
        if isinstance(exc, DBAPIError) and exc.connection_invalidated:
            logger.warning("db_connection_lost", action=action, error=reason)
            raise StorageConnectionException(reason) from exc
        logger.warning("db_query_failed", action=action, error=reason)
        raise QueryException(f"{action}: {reason}") from exc
