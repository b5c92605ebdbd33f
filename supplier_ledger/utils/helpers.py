# supplier_ledger/utils/helpers.py
from datetime import datetime
import logging
import time
import uuid
from typing import Union, Optional

from ..constants import CURRENCY_SUFFIX

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time as integer epoch milliseconds (the ledger's timestamp unit)."""
    return int(time.time() * 1000)


def generate_id() -> str:
    return uuid.uuid4().hex


def format_date(timestamp_ms: int) -> str:
    """Render an epoch-millisecond timestamp as a local date, e.g. '19 Oct 2026'."""
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%d %b %Y")


def fmt_money(
    v: NumberLike,
    places: int = 0,
    *,
    suffix: Optional[str] = CURRENCY_SUFFIX,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators, a fixed number of
    decimals and the currency suffix.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.
    """
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    text = f"{x:,.{places}f}"
    return f"{text} {suffix}" if suffix else text
