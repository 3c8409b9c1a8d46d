"""
Unit tests for feature flag backend selection.
"""

import pytest

from thurin.credentials import feature_flags


def test_default_backend_is_mock() -> None:
    assert feature_flags.get_backend_type() == "mock"


def test_env_var_controls_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("THURIN_ORACLE_BACKEND", "honk")
    assert feature_flags.get_backend_type() == "honk"


def test_prefer_overrides_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("THURIN_ORACLE_BACKEND", "honk")
    assert feature_flags.get_backend_type(prefer="mock") == "mock"


def test_set_backend_type_overrides_and_clears(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("THURIN_ORACLE_BACKEND", "mock")
    feature_flags.set_backend_type("honk")
    assert feature_flags.get_backend_type() == "honk"
    feature_flags.set_backend_type(None)
    assert feature_flags.get_backend_type() == "mock"


def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(ValueError, match="Unknown oracle backend"):
        feature_flags.get_backend_type(prefer="groth16")
    with pytest.raises(ValueError, match="Unknown oracle backend"):
        feature_flags.set_backend_type("groth16")
    monkeypatch.setenv("THURIN_ORACLE_BACKEND", "groth16")
    with pytest.raises(ValueError, match="Unknown oracle backend"):
        feature_flags.get_backend_type()


def test_empty_env_var_treated_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("THURIN_ORACLE_BACKEND", "")
    assert feature_flags.get_backend_type() == "mock"


def test_names_are_case_and_space_insensitive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("THURIN_ORACLE_BACKEND", "  HONK ")
    assert feature_flags.get_backend_type() == "honk"


def test_override_beats_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("THURIN_ORACLE_BACKEND", "mock")
    feature_flags.set_backend_type("honk")
    assert feature_flags.get_backend_type() == "honk"


def test_backend_override_context_restores_previous() -> None:
    feature_flags.set_backend_type("mock")
    with feature_flags.backend_override("honk"):
        assert feature_flags.get_backend_type() == "honk"
    assert feature_flags.get_backend_type() == "mock"


def test_non_string_value_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown oracle backend"):
        feature_flags.parse_backend(3)
