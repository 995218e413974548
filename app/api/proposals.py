from dataclasses import asdict
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Response
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.core.config import settings
from app.services.cashflow import make_fluxos
from app.services.irr import DegenerateCashflowError, annualize, solve
from app.services.pdf import build_proposal_pdf
from app.services.projections import ProjectionInput, project
from app.services.schedule import (
    CUSTOM_PRESET,
    SPLIT_PRESETS,
    ChavesForma,
    DerivedFinancials,
    ProposalInput,
    UnknownPresetError,
    apply_preset,
    baloes_from,
    build,
)

router = APIRouter(tags=["proposals"])

# 50 years of monthly rows; bounds the schedule and cash-flow vectors built per request
MAX_MONTHS = 600
MAX_PRICE = 1e12


def _camel(name: str) -> AliasChoices:
    head, *rest = name.split("_")
    return AliasChoices(name, head + "".join(p.title() for p in rest))


class BalloonModel(BaseModel):
    mes: int = Field(default=0, le=MAX_MONTHS)
    valor: float = 0.0


class ProposalModel(BaseModel):
    # accepts the front-end's camelCase keys as well (valorTotal, entradaPercent, ...)
    valor_total: float = Field(default=0.0, ge=0, le=MAX_PRICE, validation_alias=_camel("valor_total"))
    entrada_valor: float | None = Field(default=None, validation_alias=_camel("entrada_valor"))
    entrada_percent: float = Field(default=0.0, validation_alias=_camel("entrada_percent"))
    durante_obra_percent: float = Field(default=0.0, validation_alias=_camel("durante_obra_percent"))
    durante_obra_parcelas: int = Field(default=0, ge=0, le=MAX_MONTHS, validation_alias=_camel("durante_obra_parcelas"))
    chaves_percent: float = Field(default=0.0, validation_alias=_camel("chaves_percent"))
    chaves_forma: ChavesForma = Field(
        default=ChavesForma.FINANCIAMENTO, validation_alias=_camel("chaves_forma")
    )
    chaves_pos_parcelas: int = Field(default=0, ge=0, le=MAX_MONTHS, validation_alias=_camel("chaves_pos_parcelas"))
    baloes: List[BalloonModel] = Field(default_factory=list, max_length=MAX_MONTHS)
    split_preset: str = Field(default=CUSTOM_PRESET, validation_alias=_camel("split_preset"))

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {
                    "valor_total": 980000,
                    "entrada_valor": 98000,
                    "entrada_percent": 10,
                    "durante_obra_percent": 45,
                    "durante_obra_parcelas": 36,
                    "chaves_percent": 45,
                    "chaves_forma": "financiamento",
                    "chaves_pos_parcelas": 0,
                    "baloes": [],
                    "split_preset": "10-45-45",
                }
            ]
        },
    )

    def to_input(self) -> ProposalInput:
        return ProposalInput(
            valor_total=self.valor_total,
            entrada_valor=self.entrada_valor,
            entrada_percent=self.entrada_percent,
            durante_obra_percent=self.durante_obra_percent,
            durante_obra_parcelas=self.durante_obra_parcelas,
            chaves_percent=self.chaves_percent,
            chaves_forma=self.chaves_forma.value,
            chaves_pos_parcelas=self.chaves_pos_parcelas,
            baloes=baloes_from([b.model_dump() for b in self.baloes]),
            split_preset=self.split_preset,
        )


class ProjectionModel(BaseModel):
    apreciacao: float = 18.0
    prazo_entrega: float = Field(default=3.0, ge=0, le=MAX_MONTHS / 12, validation_alias=_camel("prazo_entrega"))
    adr_diaria: float = Field(default=350.0, ge=0, validation_alias=_camel("adr_diaria"))
    ocupacao: float = Field(default=70.0, ge=0, le=100)
    custos_operacionais: float = Field(
        default=30.0, ge=0, le=100, validation_alias=_camel("custos_operacionais")
    )
    prazo_short_stay: float = Field(default=5.0, ge=0, validation_alias=_camel("prazo_short_stay"))

    model_config = ConfigDict(extra="ignore")

    def to_input(self) -> ProjectionInput:
        return ProjectionInput(**self.model_dump())


class DocumentModel(BaseModel):
    company: Optional[str] = None
    proposal_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("proposal_date", "date")
    )
    validade: Optional[date] = None
    consultor: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    site_url: Optional[str] = Field(default=None, validation_alias=_camel("site_url"))
    cliente: Optional[str] = None
    cliente_phone: Optional[str] = Field(default=None, validation_alias=_camel("cliente_phone"))
    cliente_email: Optional[str] = Field(default=None, validation_alias=_camel("cliente_email"))
    empreendimento: Optional[str] = None
    endereco: Optional[str] = None
    construtora: Optional[str] = None
    tipo: Optional[str] = None
    area: Optional[float] = None
    entrega: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ProposalRequest(BaseModel):
    proposal: ProposalModel = Field(default_factory=ProposalModel)
    reference_date: Optional[date] = Field(
        default=None,
        description="Date treated as 'today' for the schedule. Defaults to the server date.",
    )


class PresetRequest(ProposalRequest):
    split_preset: Optional[str] = Field(default=None, validation_alias=_camel("split_preset"))


class CashflowRequest(ProposalRequest):
    last_month: Optional[int] = Field(
        default=None, ge=0, le=MAX_MONTHS, validation_alias=_camel("last_month")
    )


class ProjectionRequest(ProposalRequest):
    projections: ProjectionModel = Field(default_factory=ProjectionModel)


class DocumentRequest(ProjectionRequest):
    document: DocumentModel = Field(default_factory=DocumentModel)
    include_projections: bool = True


class IrrRequest(BaseModel):
    cashflows: List[float]
    guess: Optional[float] = None
    periods_per_year: int = Field(default=12, ge=1, le=365)


def _build(req: ProposalRequest) -> DerivedFinancials:
    return build(req.proposal.to_input(), today=req.reference_date)


@router.get("/proposals/presets")
def list_presets() -> dict[str, Any]:
    return {"presets": list(SPLIT_PRESETS), "custom": CUSTOM_PRESET}


@router.post("/proposals/preset")
def sync_preset(req: PresetRequest) -> dict[str, Any]:
    try:
        synced = apply_preset(req.proposal.to_input(), req.split_preset)
    except UnknownPresetError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return asdict(synced)


@router.post("/proposals/financials")
def financials(req: ProposalRequest) -> dict[str, Any]:
    return _build(req).to_dict()


@router.post("/proposals/cashflows")
def cashflows(req: CashflowRequest) -> dict[str, Any]:
    fin = _build(req)
    last = fin.last_month if req.last_month is None else req.last_month
    return {"last_month": last, "fluxos": make_fluxos(fin.schedule, last)}


@router.post("/irr")
def irr(req: IrrRequest) -> dict[str, Any]:
    try:
        result = solve(req.cashflows, req.guess)
    except DegenerateCashflowError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return {
        "status": result.status.value,
        "iterations": result.iterations,
        "rate_pct": result.rate_pct,
        "annual_rate_pct": annualize(result.rate_pct, req.periods_per_year),
        "tir": result.rate_pct if result.ok else 0.0,
    }


@router.post("/proposals/projections")
def projections(req: ProjectionRequest) -> dict[str, Any]:
    fin = _build(req)
    return project(fin, req.projections.to_input())


def _document_header(req: DocumentRequest) -> Dict[str, Any]:
    doc = req.document.model_dump()
    today = doc.pop("proposal_date", None) or req.reference_date or date.today()
    doc["date"] = today
    doc["validade"] = doc.get("validade") or today + timedelta(days=settings.PROPOSAL_VALIDITY_DAYS)
    doc["company"] = doc.get("company") or settings.COMPANY_NAME
    doc["site_url"] = doc.get("site_url") or settings.COMPANY_SITE
    doc["email"] = doc.get("email") or settings.COMPANY_EMAIL
    doc["phone"] = doc.get("phone") or settings.COMPANY_PHONE
    doc["chaves_forma"] = req.proposal.chaves_forma.value
    return doc


@router.post("/proposals/proposal.pdf")
def export_pdf(req: DocumentRequest):
    fin = _build(req)
    header = _document_header(req)
    extra = project(fin, req.projections.to_input()) if req.include_projections else None
    title = f"Proposta - {header.get('empreendimento') or 'Imóvel'}"
    try:
        pdf_bytes = build_proposal_pdf(title=title, header=header, financials=fin, projections=extra)
    except RuntimeError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    filename = f"proposta_{header['date'].isoformat()}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
