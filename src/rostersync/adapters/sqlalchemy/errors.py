"""Translate SQLAlchemy failures into domain persistence errors."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Final

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    NoResultFound,
    OperationalError,
    ProgrammingError,
    SQLAlchemyError,
)

from rostersync.domain.errors import PersistenceError, PersistenceErrorCategory

log = logging.getLogger(__name__)

_SQLSTATE_CATEGORIES: Final[dict[str, PersistenceErrorCategory]] = {
    "23505": PersistenceErrorCategory.DUPLICATE,
    "23503": PersistenceErrorCategory.INVALID_REFERENCE,
    "23502": PersistenceErrorCategory.MISSING_REQUIRED_FIELD,
    "42501": PersistenceErrorCategory.PERMISSION_DENIED,
}

# SQLite reports constraint failures only through the message text.
_MESSAGE_CATEGORIES: Final[tuple[tuple[str, PersistenceErrorCategory], ...]] = (
    ("unique constraint failed", PersistenceErrorCategory.DUPLICATE),
    ("duplicate key", PersistenceErrorCategory.DUPLICATE),
    ("foreign key constraint failed", PersistenceErrorCategory.INVALID_REFERENCE),
    ("violates foreign key", PersistenceErrorCategory.INVALID_REFERENCE),
    ("not null constraint failed", PersistenceErrorCategory.MISSING_REQUIRED_FIELD),
    ("violates not-null", PersistenceErrorCategory.MISSING_REQUIRED_FIELD),
    ("permission denied", PersistenceErrorCategory.PERMISSION_DENIED),
    ("readonly database", PersistenceErrorCategory.PERMISSION_DENIED),
)


def _sqlstate(error: DBAPIError) -> str | None:
    original = error.orig
    for attribute in ("sqlstate", "pgcode"):
        code = getattr(original, attribute, None)
        if isinstance(code, str):
            return code
    return None


def categorize(error: SQLAlchemyError) -> PersistenceErrorCategory:
    if isinstance(error, NoResultFound):
        return PersistenceErrorCategory.NOT_FOUND
    if isinstance(error, DBAPIError):
        code = _sqlstate(error)
        if code in _SQLSTATE_CATEGORIES:
            return _SQLSTATE_CATEGORIES[code]
        message = str(error.orig).lower()
        for fragment, category in _MESSAGE_CATEGORIES:
            if fragment in message:
                return category
        if isinstance(error, (IntegrityError, OperationalError, ProgrammingError)):
            log.debug("Unmapped %s: %s", type(error).__name__, message)
    return PersistenceErrorCategory.GENERIC


def translate(error: SQLAlchemyError) -> PersistenceError:
    detail = str(error.orig) if isinstance(error, DBAPIError) else str(error)
    return PersistenceError(categorize(error), detail)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise SQLAlchemy exceptions as :class:`PersistenceError`."""

    try:
        yield
    except SQLAlchemyError as exc:
        translated = translate(exc)
        log.error("Store failure (%s): %s", translated.category, translated.detail)
        raise translated from exc
