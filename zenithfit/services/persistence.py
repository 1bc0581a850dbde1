"""
Second phase of "apply locally, then persist": run a store write, and turn a
failure into a reported outcome instead of an error for the caller.
"""
import logging
from typing import Awaitable

from sqlalchemy.exc import SQLAlchemyError

from zenithfit.schemas.common import PersistOutcome

logger = logging.getLogger(__name__)


async def persist(store, label: str, operation: Awaitable) -> PersistOutcome:
    """
    Await `operation`; on a database error roll the store back, log and report it.

    The caller's in-memory result stays as it is either way, so local and stored
    state may diverge until the next successful write.
    """
    try:
        await operation
    except SQLAlchemyError as e:
        logger.error("Persisting %s failed: %s", label, e, exc_info=True)
        try:
            await store.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback after failed %s write also failed", label)
        return PersistOutcome(ok=False, error=f"Could not save {label}")
    return PersistOutcome()
