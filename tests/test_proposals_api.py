import pytest
from fastapi.testclient import TestClient

from app.main import app
from tests.proposal_payloads import sample_document, sample_payload

client = TestClient(app)


def _post(path: str, **body):
    return client.post(path, json={"proposal": sample_payload(), "reference_date": "2025-01-15", **body})


def test_financials_accept_form_payload():
    response = _post("/v1/proposals/financials")

    assert response.status_code == 200
    body = response.json()
    assert body["entrada_valor"] == 98000
    assert body["entrada_origem"] == "valor"
    assert body["valor_investido_real"] == pytest.approx(539000)
    assert len(body["schedule"]) == 37
    assert body["schedule"][1] == {"tipo": "Obra 1/36", "data": "2025-02-15", "valor": 12250.0, "mes": 1}
    assert body["last_month"] == 36


def test_snake_case_payload_is_accepted():
    response = client.post(
        "/v1/proposals/financials",
        json={"proposal": {"valor_total": 100000, "entrada_percent": 20, "chaves_forma": "avista", "chaves_percent": 80}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["entrada_valor"] == pytest.approx(20000)
    assert [e["tipo"] for e in body["schedule"]] == ["Entrada", "Chaves (à vista)"]


def test_invalid_input_is_rejected():
    payload = sample_payload()
    payload["valorTotal"] = -1
    assert client.post("/v1/proposals/financials", json={"proposal": payload}).status_code == 422

    payload = sample_payload()
    payload["chavesForma"] = "permuta"
    assert client.post("/v1/proposals/financials", json={"proposal": payload}).status_code == 422


def test_presets():
    response = client.get("/v1/proposals/presets")

    assert response.status_code == 200
    assert "10-45-45" in response.json()["presets"]
    assert response.json()["custom"] == "custom"


def test_preset_sync():
    response = _post("/v1/proposals/preset", split_preset="20-40-40")

    assert response.status_code == 200
    body = response.json()
    assert body["split_preset"] == "20-40-40"
    assert body["entrada_valor"] == pytest.approx(196000)
    assert body["chaves_percent"] == 40

    assert _post("/v1/proposals/preset", split_preset="99-1-0").status_code == 422


def test_cashflows_default_to_last_scheduled_month():
    response = _post("/v1/proposals/cashflows")

    assert response.status_code == 200
    body = response.json()
    assert body["last_month"] == 36
    assert len(body["fluxos"]) == 37
    assert body["fluxos"][0] == pytest.approx(-98000)

    assert len(_post("/v1/proposals/cashflows", last_month=48).json()["fluxos"]) == 49


def test_oversized_horizons_are_rejected():
    assert _post("/v1/proposals/cashflows", last_month=10**10).status_code == 422
    assert _post("/v1/proposals/cashflows", last_month=-1).status_code == 422

    for field in ("duranteObraParcelas", "chavesPosParcelas"):
        payload = sample_payload()
        payload[field] = 10**9
        response = client.post("/v1/proposals/financials", json={"proposal": payload})
        assert response.status_code == 422, field

    payload = sample_payload()
    payload["baloes"] = [{"mes": 10**9, "valor": 1000}]
    assert client.post("/v1/proposals/financials", json={"proposal": payload}).status_code == 422

    payload = sample_payload()
    payload["valorTotal"] = 1e308
    assert client.post("/v1/proposals/financials", json={"proposal": payload}).status_code == 422

    assert _post("/v1/proposals/cashflows", last_month=600).status_code == 200


def test_irr_endpoint():
    response = client.post("/v1/irr", json={"cashflows": [-1000, 0, 0, 1331], "periods_per_year": 1})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "converged"
    assert body["rate_pct"] == pytest.approx(10.0, abs=0.01)
    assert body["annual_rate_pct"] == pytest.approx(10.0, abs=0.01)
    assert body["tir"] == pytest.approx(10.0, abs=0.01)


def test_irr_failures():
    flat = client.post("/v1/irr", json={"cashflows": [5, 0]}).json()
    assert flat["status"] == "flat_derivative"
    assert flat["rate_pct"] is None
    assert flat["tir"] == 0.0

    assert client.post("/v1/irr", json={"cashflows": [-100]}).status_code == 422


def test_projections_endpoint():
    response = _post("/v1/proposals/projections", projections={"apreciacao": 18, "prazoEntrega": 3})

    assert response.status_code == 200
    body = response.json()
    assert body["valorizacao"]["horizonte_meses"] == 36
    assert body["short_stay"]["receita_bruta_mensal"] == pytest.approx(7350)


def test_pdf_export():
    pytest.importorskip("fpdf")

    response = _post("/v1/proposals/proposal.pdf", document=sample_document())

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/pdf")
    assert 'filename="proposta_2025-01-15.pdf"' in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_pdf_header_defaults(monkeypatch):
    captured = {}

    def fake_build_proposal_pdf(title, header, financials, projections=None):
        captured.update(title=title, header=header, projections=projections)
        return b"%PDF-1.4\n%%EOF"

    monkeypatch.setattr("app.api.proposals.build_proposal_pdf", fake_build_proposal_pdf)
    response = _post("/v1/proposals/proposal.pdf", include_projections=False)

    assert response.status_code == 200
    header = captured["header"]
    assert header["company"] == "Alvo BR Imobiliária"
    assert header["date"].isoformat() == "2025-01-15"
    assert header["validade"].isoformat() == "2025-01-22"
    assert header["chaves_forma"] == "financiamento"
    assert captured["projections"] is None
    assert captured["title"] == "Proposta - Imóvel"


def test_pdf_backend_failure_is_500(monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("fpdf library is not installed")

    monkeypatch.setattr("app.api.proposals.build_proposal_pdf", broken)

    response = _post("/v1/proposals/proposal.pdf")

    assert response.status_code == 500
    assert response.json()["detail"] == "fpdf library is not installed"
