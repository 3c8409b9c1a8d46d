import pytest

from thurin.credentials.tests.helpers import ALICE, FakeClock, make_claim, make_system


@pytest.fixture
def system():
    return make_system(FakeClock())


@pytest.fixture
def minted(system):
    claim = make_claim(ALICE)
    system.registry.mint(ALICE, claim, system.registry.mint_price())
    return system, claim
