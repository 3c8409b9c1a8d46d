import pytest

from thurin.credentials import feature_flags
from thurin.credentials.adapters.mock_oracle import MockProofOracle

from .helpers import FakeClock, make_system


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def oracle():
    return MockProofOracle(record=True)


@pytest.fixture
def system(clock, oracle):
    return make_system(clock, oracle)


@pytest.fixture(autouse=True)
def reset_feature_flags(monkeypatch):
    feature_flags.set_backend_type(None)
    monkeypatch.delenv("THURIN_ORACLE_BACKEND", raising=False)
    yield
    feature_flags.set_backend_type(None)
