"""
Unit tests for configuration module.

Tests protocol constants, runtime settings validation and YAML loading.
"""

import pytest

from thurin.credentials import config
from thurin.credentials.config import PriceTier, RegistryConfig, load_registry_config
from thurin.credentials.exceptions import InvalidConfiguration
from thurin.credentials.registry import CredentialRegistry

from .helpers import make_system


class TestConstants:
    def test_bn254_modulus(self):
        expected = 0x30644E72E131A029B85045B68181585D2833E84879B9709143E1F593F0000001
        assert config.BN254_MODULUS == expected

    def test_public_input_layout(self):
        assert config.PUBLIC_INPUT_COUNT == 11
        assert config.PUBLIC_INPUT_FIELDS[:2] == ("nullifier", "address_binding")
        assert config.PUBLIC_INPUT_FIELDS[-2:] == ("proven_state_0", "proven_state_1")

    def test_validity_defaults(self):
        assert config.DEFAULT_VALIDITY_PERIOD == 365 * 86_400
        assert config.MIN_VALIDITY_PERIOD == 30 * 86_400

    def test_validate_config(self):
        assert config.validate_config() is True


class TestRegistryConfig:
    def test_defaults_are_valid(self):
        settings = RegistryConfig()
        settings.validate()
        assert settings.proof_date_past_days == 1
        assert settings.proof_date_future_days == 0
        assert [tier.usd_cents for tier in settings.price_tiers] == [200, 500, 1_000]

    def test_instances_do_not_share_tiers(self):
        first, second = RegistryConfig(), RegistryConfig()
        first.price_tiers[0].usd_cents = 1
        assert second.price_tiers[0].usd_cents == 200

    @pytest.mark.parametrize(
        "changes",
        [
            {"validity_period": config.MIN_VALIDITY_PERIOD - 1},
            {"proof_date_past_days": -1},
            {"proof_date_future_days": 31},
            {"price_tiers": []},
            {"price_tiers": [PriceTier(None, 0)]},
            {"price_tiers": [PriceTier(10, 100)]},
            {"price_tiers": [PriceTier(10, 100), PriceTier(5, 200), PriceTier(None, 300)]},
            {"renewal_price_cents": 0},
            {"max_price_age": 0},
        ],
    )
    def test_validate_rejects(self, changes):
        with pytest.raises(InvalidConfiguration):
            RegistryConfig(**changes).validate()

    def test_registry_rejects_invalid_config(self, clock):
        system = make_system(clock)
        with pytest.raises(InvalidConfiguration):
            CredentialRegistry(
                system.ledger,
                system.admin,
                system.trust_roots,
                None,
                system.price_source,
                system.points,
                RegistryConfig(max_price_age=-5),
            )


class TestYamlLoading:
    def test_load_full_file(self, tmp_path):
        path = tmp_path / "registry.yaml"
        path.write_text(
            "validity_days: 180\n"
            "proof_date_window:\n"
            "  past_days: 2\n"
            "  future_days: 1\n"
            "pricing:\n"
            "  renewal_usd_cents: 700\n"
            "  max_price_age: 600\n"
            "  tiers:\n"
            "    - {cap: 100, usd_cents: 150}\n"
            "    - {usd_cents: 900}\n",
            encoding="utf-8",
        )
        settings = load_registry_config(path)
        assert settings.validity_period == 180 * 86_400
        assert settings.proof_date_past_days == 2
        assert settings.proof_date_future_days == 1
        assert settings.renewal_price_cents == 700
        assert settings.max_price_age == 600
        assert settings.price_tiers == [PriceTier(100, 150), PriceTier(None, 900)]

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_registry_config(path) == RegistryConfig()

    def test_invalid_values_rejected(self, tmp_path):
        path = tmp_path / "short.yaml"
        path.write_text("validity_days: 7\n", encoding="utf-8")
        with pytest.raises(InvalidConfiguration, match="validity_period"):
            load_registry_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidConfiguration, match="cannot read"):
            load_registry_config(tmp_path / "absent.yaml")

    def test_broken_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("pricing: [unclosed\n", encoding="utf-8")
        with pytest.raises(InvalidConfiguration):
            load_registry_config(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(InvalidConfiguration, match="mapping"):
            load_registry_config(path)
