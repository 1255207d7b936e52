from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session

from salesync.core.logging import logger

# database unreachable: abort the run rather than fail every remaining unit
SYSTEMIC_ERRORS = (OperationalError, InterfaceError)


@dataclass
class UpsertResult:
    created: int = 0
    updated: int = 0
    failed: int = 0
    stores: set[str] = field(default_factory=set)

    @property
    def stores_processed(self) -> int:
        return len(self.stores)


def apply_unit(
    db: Session,
    result: UpsertResult,
    tier: str,
    upsert: Callable[[], bool],
    store_code: str,
    **ctx: Any,
) -> None:
    """Run one (store, period) upsert in its own transaction.

    ``upsert`` returns True when it created the row, False when it updated it.
    A failing unit is rolled back and counted; committed units stay committed.
    """
    try:
        created = upsert()
        db.commit()
    except SYSTEMIC_ERRORS:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        result.failed += 1
        logger.exception(f"{tier}_unit_failed", store_code=store_code, error=str(e), **ctx)
        return

    if created:
        result.created += 1
    else:
        result.updated += 1
    result.stores.add(store_code)
