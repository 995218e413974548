from datetime import date

import pytest

from app.services import pdf as pdf_svc
from app.services.pdf import build_proposal_pdf
from app.services.projections import project
from app.services.schedule import Balloon, ChavesForma, build
from tests.proposal_payloads import sample_proposal

pytest.importorskip("fpdf")


def _header(**overrides) -> dict:
    header = {
        "company": "Alvo BR Imobiliária",
        "site_url": "https://alvobr.com.br",
        "email": "contato@alvobr.com.br",
        "phone": "(47) 9 9999-9999",
        "date": date(2025, 1, 15),
        "validade": date(2025, 1, 22),
        "consultor": "Nome do Consultor",
        "cliente": "Nome do Cliente",
        "empreendimento": "Residencial Atlântico",
        "area": 74,
        "chaves_forma": ChavesForma.FINANCIAMENTO.value,
    }
    header.update(overrides)
    return header


def test_proposal_pdf_with_projections(proposal, today):
    fin = build(proposal, today=today)

    pdf_bytes = build_proposal_pdf(
        title="Proposta - Residencial Atlântico",
        header=_header(),
        financials=fin,
        projections=project(fin),
    )

    assert pdf_bytes.startswith(b"%PDF")
    assert len(pdf_bytes) > 1000


def test_long_schedule_renders(today):
    fin = build(
        sample_proposal(
            durante_obra_parcelas=60,
            chaves_forma=ChavesForma.POS_CONSTRUTORA.value,
            chaves_pos_parcelas=48,
            baloes=(Balloon(mes=12, valor=20000), Balloon(mes=24, valor=20000)),
        ),
        today=today,
    )

    pdf_bytes = build_proposal_pdf("Proposta", _header(chaves_forma="posConstrutora"), fin)

    assert pdf_bytes.startswith(b"%PDF")
    assert len(fin.schedule) == 1 + 60 + 48 + 2


def test_text_outside_latin1_does_not_break_export(proposal, today):
    fin = build(proposal, today=today)

    pdf_bytes = build_proposal_pdf("Proposta", _header(cliente="Zoë 李"), fin)

    assert pdf_bytes.startswith(b"%PDF")


def test_missing_backend_raises(monkeypatch, proposal, today):
    monkeypatch.setattr(pdf_svc, "FPDF", None)

    with pytest.raises(RuntimeError):
        build_proposal_pdf("Proposta", _header(), build(proposal, today=today))
