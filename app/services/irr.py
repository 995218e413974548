import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from app.core.config import settings

logger = logging.getLogger(__name__)


class DegenerateCashflowError(ValueError):
    """Raised when a cash-flow vector is too short to have an IRR."""


class IrrStatus(str, Enum):
    CONVERGED = "converged"
    FLAT_DERIVATIVE = "flat_derivative"
    MAX_ITERATIONS = "max_iterations"
    DIVERGED = "diverged"


@dataclass(frozen=True)
class IrrResult:
    status: IrrStatus
    rate: Optional[float]  # periodic rate as a decimal, only set when converged
    iterations: int

    @property
    def ok(self) -> bool:
        return self.status is IrrStatus.CONVERGED

    @property
    def rate_pct(self) -> Optional[float]:
        return None if self.rate is None else self.rate * 100.0


def _npv_and_derivative(cash: Sequence[float], r: float) -> tuple[float, float]:
    npv = 0.0
    deriv = 0.0
    base = 1.0 + r
    for t, cf in enumerate(cash):
        npv += cf / base**t
        deriv -= t * cf / base ** (t + 1)
    return npv, deriv


def solve(
    cashflows: Sequence[float],
    guess: float | None = None,
    max_iterations: int | None = None,
    tolerance: float | None = None,
) -> IrrResult:
    """
    Newton-Raphson IRR of a periodic cash-flow vector (index 0 = today).

    Convergence is tested on |NPV| before each update, so a guess that is
    already the root converges at iteration 0. Failure modes are reported
    through ``IrrResult.status`` instead of a magic number.
    """
    cash = [float(cf or 0.0) for cf in cashflows]
    if len(cash) < 2:
        raise DegenerateCashflowError(
            f"IRR needs at least two cash flows, got {len(cash)}"
        )
    rate = settings.IRR_GUESS if guess is None else float(guess)
    cap = settings.IRR_MAX_ITERATIONS if max_iterations is None else int(max_iterations)
    tol = settings.IRR_TOLERANCE if tolerance is None else float(tolerance)

    iterations = 0
    while iterations < cap:
        if 1.0 + rate == 0.0:
            logger.warning("IRR diverged: rate reached -100%% after %d iterations", iterations)
            return IrrResult(IrrStatus.DIVERGED, None, iterations)
        try:
            npv, deriv = _npv_and_derivative(cash, rate)
        except (OverflowError, ZeroDivisionError) as exc:
            logger.warning("IRR diverged after %d iterations: %s", iterations, exc)
            return IrrResult(IrrStatus.DIVERGED, None, iterations)

        if abs(npv) < tol:
            return IrrResult(IrrStatus.CONVERGED, rate, iterations)
        if deriv == 0:
            logger.warning("IRR aborted: flat NPV derivative at rate %.6f", rate)
            return IrrResult(IrrStatus.FLAT_DERIVATIVE, None, iterations)

        rate = rate - npv / deriv
        iterations += 1
        if not math.isfinite(rate):
            logger.warning("IRR diverged: non-finite rate after %d iterations", iterations)
            return IrrResult(IrrStatus.DIVERGED, None, iterations)

    logger.warning("IRR did not converge within %d iterations", cap)
    return IrrResult(IrrStatus.MAX_ITERATIONS, None, iterations)


def calcular_tir(cashflows: Sequence[float], guess: float | None = None) -> float:
    """Percentage IRR, with 0.0 standing in for every failure status."""
    result = solve(cashflows, guess)
    return result.rate_pct if result.ok else 0.0


def annualize(period_pct: float | None, periods: int = 12) -> Optional[float]:
    """Compound a periodic percentage rate over ``periods`` periods (monthly -> annual by default)."""
    if period_pct is None:
        return None
    try:
        return ((1.0 + period_pct / 100.0) ** periods - 1.0) * 100.0
    except OverflowError:
        return None
