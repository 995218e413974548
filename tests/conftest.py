from datetime import date

import pytest

from app.services.schedule import ProposalInput
from tests.proposal_payloads import sample_proposal

REFERENCE_DATE = date(2025, 1, 15)


@pytest.fixture
def today() -> date:
    return REFERENCE_DATE


@pytest.fixture
def proposal() -> ProposalInput:
    return sample_proposal()
