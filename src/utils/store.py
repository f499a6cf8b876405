"""Write helpers around the SQLAlchemy session (the entity store)."""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StoreError

logger = logging.getLogger(__name__)


@contextmanager
def transaction(
    db: Session,
    action: str,
    on_integrity_error: Optional[Callable[[IntegrityError], Exception]] = None,
) -> Iterator[Session]:
    """Run a unit of work and commit it, or roll everything back.

    Args:
        db: SQLAlchemy Session.
        action: Short description used in logs and the StoreError message.
        on_integrity_error: Maps a constraint violation onto a domain error.
            Without it the violation surfaces as StoreError.

    Raises:
        StoreError: If the store fails for any other reason.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if on_integrity_error is not None:
            raise on_integrity_error(exc) from exc
        logger.error("Constraint violation while trying to %s: %s", action, exc.orig)
        raise StoreError(f"Failed to {action}") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Store failure while trying to %s: %s", action, exc)
        raise StoreError(f"Failed to {action}") from exc
    except Exception:
        db.rollback()
        raise
