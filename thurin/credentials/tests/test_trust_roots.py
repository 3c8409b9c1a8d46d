import pytest

from thurin.credentials.events import TrustRootChanged
from thurin.credentials.exceptions import MalformedInput, NotAdministrator

from .helpers import ALICE, OWNER, ROOT

OTHER_ROOT = bytes.fromhex("20" * 32)


def test_add_and_remove(system):
    roots = system.trust_roots
    events = []
    system.events.subscribe(events.append)

    roots.add_root(OWNER, "0x" + OTHER_ROOT.hex(), "California DMV")
    assert roots.is_trusted(OTHER_ROOT)
    assert roots.get(OTHER_ROOT).label == "California DMV"

    roots.remove_root(OWNER, OTHER_ROOT)
    assert not roots.is_trusted(OTHER_ROOT)
    assert roots.get(OTHER_ROOT).label == "California DMV"
    assert events == [
        TrustRootChanged(root=OTHER_ROOT, trusted=True),
        TrustRootChanged(root=OTHER_ROOT, trusted=False),
    ]


def test_unknown_root_is_untrusted(system):
    assert not system.trust_roots.is_trusted(OTHER_ROOT)
    assert system.trust_roots.get(OTHER_ROOT) is None


def test_remove_unknown_root_records_revocation(system):
    system.trust_roots.remove_root(OWNER, OTHER_ROOT)
    assert system.trust_roots.get(OTHER_ROOT).trusted is False


def test_roots_lists_entries(system):
    system.trust_roots.add_root(OWNER, OTHER_ROOT)
    listed = dict(system.trust_roots.roots())
    assert set(listed) == {ROOT, OTHER_ROOT}
    assert listed[ROOT].label == "Test DMV"


def test_rejects_wrong_width(system):
    with pytest.raises(MalformedInput):
        system.trust_roots.add_root(OWNER, b"\x01" * 20)


def test_rejects_non_text_label(system):
    with pytest.raises(TypeError):
        system.trust_roots.add_root(OWNER, OTHER_ROOT, label=b"dmv")


def test_failed_change_is_not_applied(system):
    events = []
    system.events.subscribe(events.append)
    with pytest.raises(NotAdministrator):
        system.trust_roots.add_root(ALICE, OTHER_ROOT)
    assert system.trust_roots.get(OTHER_ROOT) is None
    assert events == []
