from typing import Iterable, List

from app.services.schedule import ScheduleEntry


def make_fluxos(schedule: Iterable[ScheduleEntry], last_month: int) -> List[float]:
    """
    Month-indexed cash flows of a payment schedule (index 0 = today).

    Payments are outflows, so each entry is subtracted at its month and
    entries sharing a month accumulate. The vector covers ``last_month`` and
    grows when an entry falls after it, so no payment is dropped. Inflows
    (resale, rent) are the caller's job, see ``add_inflow``.
    """
    entries = list(schedule)
    size = max(0, int(last_month or 0))
    if entries:
        size = max(size, max(e.mes for e in entries))
    cash = [0.0] * (size + 1)
    for e in entries:
        cash[e.mes] -= e.valor
    return cash


def add_inflow(cash: List[float], month: int, amount: float) -> List[float]:
    month = max(0, int(month))
    out = list(cash)
    if month >= len(out):
        out += [0.0] * (month + 1 - len(out))
    out[month] += amount
    return out
