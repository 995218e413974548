"""pt-BR display helpers shared by the proposal document and the API."""

import math
import re
from datetime import date
from typing import Any

from dateutil.relativedelta import relativedelta

_CURRENCY_NOISE = re.compile(r"[R$\s.]")


def _swap_separators(text: str) -> str:
    # 1,234.56 -> 1.234,56
    return text.replace(",", "X").replace(".", ",").replace("X", ".")


def brl(value: Any) -> str:
    """Format a number as Brazilian reais: ``R$ 1.234,56`` / ``-R$ 1.234,56``."""
    try:
        v = float(value if value is not None else 0)
    except (TypeError, ValueError):
        v = 0.0
    if not math.isfinite(v):
        v = 0.0
    if v < 0:
        return f"-R$ {_swap_separators(f'{abs(v):,.2f}')}"
    return f"R$ {_swap_separators(f'{v:,.2f}')}"


def pct(value: Any) -> str:
    """Percent with at most two decimals and no trailing zeros (``12,5%``)."""
    try:
        v = float(value if value is not None else 0)
    except (TypeError, ValueError):
        v = 0.0
    if not math.isfinite(v):
        v = 0.0
    text = f"{v:,.2f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return _swap_separators(text) + "%"


def currency_to_number(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    if not value:
        return 0.0
    clean = _CURRENCY_NOISE.sub("", str(value)).replace(",", ".", 1)
    try:
        return float(clean)
    except ValueError:
        return 0.0


def fmt_date(d: date | None) -> str:
    if d is None:
        return ""
    return d.strftime("%d/%m/%Y")


def add_months(d: date, months: int) -> date:
    # relativedelta clamps to the last day of the target month (Jan 31 + 1 -> Feb 28/29)
    return d + relativedelta(months=months)
