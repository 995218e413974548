from typing import Any, Dict, List, Tuple

from app.services.formatting import brl, fmt_date, pct
from app.services.schedule import ChavesForma, DerivedFinancials

try:  # pragma: no cover - dependency availability handled at runtime
    from fpdf import FPDF
    from fpdf.enums import XPos, YPos
except ModuleNotFoundError:  # pragma: no cover
    FPDF = None  # type: ignore[assignment]

CHAVES_LABELS = {
    ChavesForma.FINANCIAMENTO.value: "Financiamento bancário",
    ChavesForma.AVISTA.value: "À vista na entrega",
    ChavesForma.POS_CONSTRUTORA.value: "Parcelado com a construtora",
}

PRIMARY = (52, 116, 126)
TEXT = (58, 58, 58)


def _latin1(text: Any) -> str:
    # core PDF fonts only cover latin-1
    return str(text if text is not None else "").encode("latin-1", "replace").decode("latin-1")


def _line(pdf: "FPDF", h: float, text: Any, w: float = 0) -> None:
    pdf.cell(w, h, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _section(pdf: "FPDF", title: str) -> None:
    pdf.ln(3)
    pdf.set_font("Helvetica", "B", 12)
    pdf.set_text_color(*PRIMARY)
    _line(pdf, 8, title)
    pdf.set_text_color(*TEXT)
    pdf.set_font("Helvetica", "", 10)


def _rows(pdf: "FPDF", rows: List[Tuple[str, Any]], label_w: float = 70) -> None:
    for label, value in rows:
        pdf.cell(label_w, 6, _latin1(f"{label}:"))
        _line(pdf, 6, value)


def build_proposal_pdf(
    title: str,
    header: Dict[str, Any],
    financials: DerivedFinancials,
    projections: Dict[str, Any] | None = None,
) -> bytes:
    if FPDF is None:
        raise RuntimeError("fpdf library is not installed")
    pdf = FPDF(orientation="P", unit="mm", format="A4")
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()
    pdf.set_title(_latin1(title))
    pdf.set_text_color(*TEXT)

    # Letterhead
    pdf.set_font("Helvetica", "B", 18)
    _line(pdf, 10, header.get("company"))
    pdf.set_font("Helvetica", "", 9)
    contact = " | ".join(
        str(header[k]) for k in ("site_url", "email", "phone") if header.get(k)
    )
    _line(pdf, 5, contact)
    pdf.ln(2)
    pdf.set_font("Helvetica", "B", 14)
    pdf.set_text_color(*PRIMARY)
    _line(pdf, 9, title)
    pdf.set_text_color(*TEXT)
    pdf.set_font("Helvetica", "", 10)
    _rows(
        pdf,
        [
            ("Data", fmt_date(header.get("date"))),
            ("Válida até", fmt_date(header.get("validade"))),
            ("Consultor", header.get("consultor") or ""),
        ],
        label_w=35,
    )

    _section(pdf, "Cliente")
    _rows(
        pdf,
        [
            ("Nome", header.get("cliente") or ""),
            ("Telefone", header.get("cliente_phone") or ""),
            ("E-mail", header.get("cliente_email") or ""),
        ],
        label_w=35,
    )

    _section(pdf, "Imóvel")
    area = header.get("area")
    _rows(
        pdf,
        [
            ("Empreendimento", header.get("empreendimento") or ""),
            ("Endereço", header.get("endereco") or ""),
            ("Construtora", header.get("construtora") or ""),
            ("Tipo", header.get("tipo") or ""),
            ("Área privativa", f"{area:g} m²" if area else ""),
            ("Entrega", header.get("entrega") or ""),
        ],
        label_w=35,
    )

    _section(pdf, "Condições de pagamento")
    forma = header.get("chaves_forma") or ""
    _rows(
        pdf,
        [
            ("Valor do imóvel", brl(financials.total)),
            ("Entrada", f"{brl(financials.entrada_valor)} ({pct(financials.entrada_percent)})"),
            ("Durante a obra", brl(financials.durante_obra_total)),
            ("Parcela mensal da obra", brl(financials.durante_obra_parcela)),
            ("Chaves", f"{brl(financials.chaves_total)} - {CHAVES_LABELS.get(forma, forma)}"),
            ("Valor investido real", brl(financials.valor_investido_real)),
        ],
    )

    _section(pdf, "Cronograma")
    pdf.set_font("Helvetica", "B", 9)
    pdf.cell(70, 6, "Parcela", border="B")
    pdf.cell(40, 6, "Vencimento", border="B")
    pdf.cell(50, 6, "Valor", border="B", align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "", 9)
    for e in financials.schedule:
        pdf.cell(70, 5, _latin1(e.tipo))
        pdf.cell(40, 5, fmt_date(e.data))
        pdf.cell(50, 5, _latin1(brl(e.valor)), align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "B", 9)
    pdf.cell(110, 6, "Total programado", border="T")
    pdf.cell(
        50,
        6,
        _latin1(brl(sum(e.valor for e in financials.schedule))),
        border="T",
        align="R",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )

    if projections:
        val = projections.get("valorizacao") or {}
        if val:
            _section(pdf, "Projeção de valorização")
            tir = val.get("tir_anual_pct")
            _rows(
                pdf,
                [
                    ("Horizonte", f"{val.get('horizonte_meses')} meses"),
                    ("Valor projetado", brl(val.get("valor_futuro"))),
                    ("Lucro projetado", brl(val.get("lucro"))),
                    ("Retorno sobre o investido", pct(val.get("roi_pct"))),
                    ("TIR anual", pct(tir) if tir is not None else "n/d"),
                ],
            )
        stay = projections.get("short_stay") or {}
        if stay:
            _section(pdf, "Projeção short stay")
            payback = stay.get("payback_anos")
            _rows(
                pdf,
                [
                    ("Receita bruta mensal", brl(stay.get("receita_bruta_mensal"))),
                    ("Receita líquida mensal", brl(stay.get("receita_liquida_mensal"))),
                    ("Yield líquido anual", pct(stay.get("yield_liquido_pct"))),
                    ("Receita acumulada", brl(stay.get("receita_acumulada"))),
                    ("Payback", f"{payback:.1f} anos" if payback else "n/d"),
                ],
            )

    pdf.ln(4)
    pdf.set_font("Helvetica", "I", 8)
    pdf.multi_cell(
        0,
        4,
        _latin1(
            "Valores sujeitos a alteração sem aviso prévio. Projeções são estimativas "
            "e não constituem garantia de rentabilidade."
        ),
    )

    return bytes(pdf.output())
