from decimal import Decimal, InvalidOperation
from typing import Any, Optional

CENT = Decimal("0.01")


def norm_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None


def trunc(v: Any, max_len: int) -> Optional[str]:
    s = norm_str(v)
    if s is None:
        return None
    return s[:max_len]


def money(v: Any) -> Decimal:
    if v is None:
        return Decimal("0.00")
    try:
        return Decimal(v).quantize(CENT)
    except (InvalidOperation, TypeError, ValueError):
        return Decimal("0.00")
