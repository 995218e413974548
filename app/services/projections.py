"""
Investment projections attached to a proposal.

Two scenarios are offered to the client: reselling the unit at key delivery
after the market appreciates, and renting it out as a short stay. Both read
the already-built ``DerivedFinancials``; the resale scenario runs the
schedule through the cash-flow vectorizer and the IRR solver.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict

from app.services.cashflow import add_inflow, make_fluxos
from app.services.irr import annualize, solve
from app.services.schedule import DerivedFinancials

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30
# starting rate for monthly-period flows
MONTHLY_IRR_GUESS = 0.01


@dataclass(frozen=True)
class ProjectionInput:
    apreciacao: float = 18.0  # % appreciation up to delivery
    prazo_entrega: float = 3.0  # years
    adr_diaria: float = 350.0  # average daily rate
    ocupacao: float = 70.0  # %
    custos_operacionais: float = 30.0  # % of gross revenue
    prazo_short_stay: float = 5.0  # years


def _ratio(num: float, den: float) -> float:
    return num / den if den else 0.0


def appreciation_projection(fin: DerivedFinancials, params: ProjectionInput) -> Dict[str, Any]:
    horizon = max(1, round((params.prazo_entrega or 0) * 12))
    valor_futuro = fin.total * (1.0 + (params.apreciacao or 0) / 100.0)
    paid_entries = [e for e in fin.schedule if e.mes <= horizon]
    pago = sum(e.valor for e in paid_entries)
    saldo_devedor = max(0.0, fin.total - pago)
    lucro = valor_futuro - fin.total
    retorno_liquido = valor_futuro - saldo_devedor

    fluxos = add_inflow(make_fluxos(paid_entries, horizon), horizon, retorno_liquido)
    tir_status = "no_payments"
    tir_mensal = None
    if pago > 0:
        irr = solve(fluxos, guess=MONTHLY_IRR_GUESS)
        tir_status = irr.status.value
        tir_mensal = irr.rate_pct
        if not irr.ok:
            logger.warning("resale IRR unavailable (%s) for horizon=%d", tir_status, horizon)

    return {
        "horizonte_meses": horizon,
        "valor_futuro": valor_futuro,
        "pago_ate_entrega": pago,
        "saldo_devedor": saldo_devedor,
        "lucro": lucro,
        "retorno_liquido": retorno_liquido,
        "roi_pct": _ratio(lucro, pago) * 100.0,
        "multiplicador": _ratio(retorno_liquido, pago),
        "tir_status": tir_status,
        "tir_mensal_pct": tir_mensal,
        "tir_anual_pct": annualize(tir_mensal),
        "fluxos": fluxos,
    }


def short_stay_projection(fin: DerivedFinancials, params: ProjectionInput) -> Dict[str, Any]:
    bruta_mensal = (params.adr_diaria or 0) * DAYS_PER_MONTH * (params.ocupacao or 0) / 100.0
    custos_mensais = bruta_mensal * (params.custos_operacionais or 0) / 100.0
    liquida_mensal = bruta_mensal - custos_mensais
    liquida_anual = liquida_mensal * 12
    return {
        "receita_bruta_mensal": bruta_mensal,
        "custos_mensais": custos_mensais,
        "receita_liquida_mensal": liquida_mensal,
        "receita_liquida_anual": liquida_anual,
        "yield_bruto_pct": _ratio(bruta_mensal * 12, fin.total) * 100.0,
        "yield_liquido_pct": _ratio(liquida_anual, fin.total) * 100.0,
        "yield_sobre_investido_pct": _ratio(liquida_anual, fin.valor_investido_real) * 100.0,
        "receita_acumulada": liquida_anual * (params.prazo_short_stay or 0),
        "payback_anos": fin.total / liquida_anual if liquida_anual > 0 else None,
    }


def project(fin: DerivedFinancials, params: ProjectionInput | None = None) -> Dict[str, Any]:
    params = params or ProjectionInput()
    return {
        "valorizacao": appreciation_projection(fin, params),
        "short_stay": short_stay_projection(fin, params),
    }
