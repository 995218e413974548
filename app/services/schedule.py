"""
Payment schedule of a purchase proposal.

A proposal splits the price into a down payment (entrada), monthly
installments while the building is under construction (obra) and a
key-delivery balance (chaves) that is financed, paid at once or split in
installments with the builder. Extra balloon payments (balões) can be
scheduled at any month. ``build`` is a pure function of its input: every
call rebuilds the derived view from scratch.
"""

import logging
import math
from dataclasses import asdict, dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.services.formatting import add_months

logger = logging.getLogger(__name__)


class UnknownPresetError(ValueError):
    """Raised for a split preset outside ``SPLIT_PRESETS``."""


class ChavesForma(str, Enum):
    FINANCIAMENTO = "financiamento"
    AVISTA = "avista"
    POS_CONSTRUTORA = "posConstrutora"


CUSTOM_PRESET = "custom"
# entrada - obra - chaves, in percent of the price
SPLIT_PRESETS: Tuple[str, ...] = (
    "10-45-45",
    "20-40-40",
    "30-30-40",
    "20-30-50",
    "10-30-60",
    "30-40-30",
    CUSTOM_PRESET,
)


@dataclass(frozen=True)
class Balloon:
    mes: Optional[int] = 0
    valor: Optional[float] = 0.0


@dataclass(frozen=True)
class ProposalInput:
    valor_total: Optional[float] = 0.0
    entrada_valor: Optional[float] = 0.0
    entrada_percent: Optional[float] = 0.0
    durante_obra_percent: Optional[float] = 0.0
    durante_obra_parcelas: Optional[int] = 0
    chaves_percent: Optional[float] = 0.0
    chaves_forma: str = ChavesForma.FINANCIAMENTO.value
    chaves_pos_parcelas: Optional[int] = 0
    baloes: Tuple[Balloon, ...] = ()
    split_preset: str = CUSTOM_PRESET


@dataclass(frozen=True)
class ScheduleEntry:
    tipo: str
    data: date
    valor: float
    mes: int


@dataclass(frozen=True)
class DerivedFinancials:
    total: float
    entrada_valor: float
    entrada_percent: float
    entrada_origem: str  # "valor" when the typed amount won, "percent" otherwise
    durante_obra_total: float
    durante_obra_parcela: float
    chaves_total: float
    valor_investido_real: float
    schedule: Tuple[ScheduleEntry, ...] = field(default_factory=tuple)

    @property
    def last_month(self) -> int:
        return max((e.mes for e in self.schedule), default=0)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["schedule"] = [
            {**asdict(e), "data": e.data.isoformat()} for e in self.schedule
        ]
        out["last_month"] = self.last_month
        return out


def _num(x: Any) -> float:
    try:
        v = float(x or 0)
    except (TypeError, ValueError):
        return 0.0
    return v if math.isfinite(v) else 0.0


def _count(x: Any) -> int:
    return max(0, int(_num(x)))


def _share(total: float, percent: Any) -> float:
    # percent / 100 first: a share of a finite total stays finite
    return _num(total * (_num(percent) / 100.0))


def _forma(x: Any) -> str:
    return x.value if isinstance(x, ChavesForma) else str(x or "")


def build(data: ProposalInput, today: date | None = None) -> DerivedFinancials:
    hoje = today or date.today()
    total = _num(data.valor_total)

    typed_entrada = _num(data.entrada_valor)
    if typed_entrada:
        entrada_valor = typed_entrada
        origem = "valor"
    else:
        entrada_valor = _share(total, data.entrada_percent)
        origem = "percent"
    entrada_percent = _num(entrada_valor / total * 100.0) if total > 0 else 0.0

    n = _count(data.durante_obra_parcelas)
    durante_obra_total = _share(total, data.durante_obra_percent)
    durante_obra_parcela = durante_obra_total / n if n > 0 else 0.0
    chaves_total = _share(total, data.chaves_percent)

    forma = _forma(data.chaves_forma)
    if forma == ChavesForma.FINANCIAMENTO.value:
        # the financed balance is paid by the bank, not out of the client's pocket
        valor_investido_real = _num(entrada_valor + durante_obra_total)
    else:
        valor_investido_real = _num(entrada_valor + durante_obra_total + chaves_total)

    schedule: List[ScheduleEntry] = []
    if entrada_valor > 0:
        schedule.append(ScheduleEntry("Entrada", hoje, entrada_valor, 0))

    for i in range(1, n + 1):
        schedule.append(
            ScheduleEntry(f"Obra {i}/{n}", add_months(hoje, i), durante_obra_parcela, i)
        )

    if forma == ChavesForma.AVISTA.value and chaves_total > 0:
        schedule.append(
            ScheduleEntry("Chaves (à vista)", add_months(hoje, n + 1), chaves_total, n + 1)
        )

    if forma == ChavesForma.POS_CONSTRUTORA.value and chaves_total > 0:
        parcelas = _count(data.chaves_pos_parcelas)
        valor_pos = chaves_total / max(parcelas, 1)
        for i in range(1, parcelas + 1):
            schedule.append(
                ScheduleEntry(
                    f"Pós-chaves {i}/{parcelas}", add_months(hoje, n + i), valor_pos, n + i
                )
            )

    for idx, b in enumerate(data.baloes or (), start=1):
        mes = _count(b.mes)
        valor = _num(b.valor)
        if valor > 0:
            schedule.append(ScheduleEntry(f"Balão {idx}", add_months(hoje, mes), valor, mes))

    # sorted() is stable: same-month entries keep insertion order
    schedule = sorted(schedule, key=lambda e: e.mes)

    logger.debug(
        "proposal built: total=%.2f entrada=%.2f investido=%.2f entries=%d",
        total,
        entrada_valor,
        valor_investido_real,
        len(schedule),
    )
    return DerivedFinancials(
        total=total,
        entrada_valor=entrada_valor,
        entrada_percent=entrada_percent,
        entrada_origem=origem,
        durante_obra_total=durante_obra_total,
        durante_obra_parcela=durante_obra_parcela,
        chaves_total=chaves_total,
        valor_investido_real=valor_investido_real,
        schedule=tuple(schedule),
    )


def parse_preset(preset: str) -> Tuple[float, float, float]:
    if preset not in SPLIT_PRESETS or preset == CUSTOM_PRESET:
        raise UnknownPresetError(f"Unknown split preset: {preset!r}")
    e, o, c = (float(p) for p in preset.split("-"))
    return e, o, c


def apply_preset(data: ProposalInput, preset: str | None = None) -> ProposalInput:
    """
    Sync the percentage split with a preset such as ``"20-40-40"``.

    ``custom`` leaves hand-edited percentages untouched. Any other preset
    overwrites all three percentages and re-derives the down payment amount
    from the new percentage (kept as-is while the price is still 0).
    """
    chosen = data.split_preset if preset is None else preset
    if not chosen:
        return data
    if chosen == CUSTOM_PRESET:
        return replace(data, split_preset=CUSTOM_PRESET)
    e, o, c = parse_preset(chosen)
    total = _num(data.valor_total)
    return replace(
        data,
        split_preset=chosen,
        entrada_percent=e,
        durante_obra_percent=o,
        chaves_percent=c,
        entrada_valor=_share(total, e) if total else data.entrada_valor,
    )


def baloes_from(items: Sequence[Any]) -> Tuple[Balloon, ...]:
    out = []
    for item in items or ():
        if isinstance(item, Balloon):
            out.append(item)
        elif isinstance(item, dict):
            out.append(Balloon(mes=item.get("mes"), valor=item.get("valor")))
        else:
            out.append(Balloon(mes=getattr(item, "mes", 0), valor=getattr(item, "valor", 0)))
    return tuple(out)
