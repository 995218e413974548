import pytest

from app.services.cashflow import add_inflow, make_fluxos
from app.services.schedule import Balloon, build
from tests.proposal_payloads import sample_proposal


def test_vector_covers_requested_months(proposal, today):
    fin = build(proposal, today=today)

    cash = make_fluxos(fin.schedule, 36)

    assert len(cash) == 37
    assert cash[0] == pytest.approx(-98000)
    assert cash[1] == pytest.approx(-12250)
    assert sum(cash) == pytest.approx(-539000)


def test_same_month_entries_accumulate(today):
    fin = build(sample_proposal(baloes=(Balloon(mes=0, valor=2000), Balloon(mes=3, valor=500))), today=today)

    cash = make_fluxos(fin.schedule, 40)

    assert cash[0] == pytest.approx(-100000)
    assert cash[3] == pytest.approx(-12750)
    assert cash[37:] == [0.0, 0.0, 0.0, 0.0]


def test_entries_after_last_month_extend_the_vector(proposal, today):
    fin = build(proposal, today=today)

    cash = make_fluxos(fin.schedule, 2)

    assert len(cash) == 37
    assert cash[36] == pytest.approx(-12250)


def test_empty_schedule():
    assert make_fluxos([], -5) == [0.0]
    assert make_fluxos([], 3) == [0.0, 0.0, 0.0, 0.0]


def test_add_inflow_returns_a_copy():
    cash = [-100.0, 0.0]

    out = add_inflow(cash, 3, 150.0)

    assert out == [-100.0, 0.0, 0.0, 150.0]
    assert cash == [-100.0, 0.0]
    assert add_inflow(out, 1, 10.0)[1] == 10.0
