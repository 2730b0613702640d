"""Test Settings loading from defaults, env vars and TOML files."""

import pytest
from pydantic import ValidationError

from wishin.core.config import DEFAULT_LIMITS, DomainLimits, Settings, load_settings
from wishin.core.errors import ConfigError


class TestDefaults:
    def test_domain_limits(self):
        settings = Settings()
        assert settings.limits.max_items_per_wishlist == 100
        assert settings.limits.wishlist_title_min == 3
        assert settings.limits.wishlist_title_max == 100
        assert settings.limits.wishlist_description_max == 500
        assert settings.limits.item_description_max == 200
        assert settings.limits.username_min == 3
        assert settings.limits.username_max == 30
        assert settings.limits.bio_max == 500

    def test_observability(self):
        settings = Settings()
        assert settings.observability.log_level == "INFO"
        assert settings.observability.log_format == "json"

    def test_default_limits_match_settings(self):
        assert DEFAULT_LIMITS == DomainLimits()

    def test_limits_are_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_LIMITS.max_items_per_wishlist = 5


class TestEnvironment:
    def test_nested_env_override(self, monkeypatch):
        monkeypatch.setenv("WISHIN_LIMITS__MAX_ITEMS_PER_WISHLIST", "50")
        monkeypatch.setenv("WISHIN_OBSERVABILITY__LOG_LEVEL", "DEBUG")
        settings = Settings()
        assert settings.limits.max_items_per_wishlist == 50
        assert settings.observability.log_level == "DEBUG"


class TestLoadSettings:
    def test_no_file(self):
        assert load_settings().limits.max_items_per_wishlist == 100

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.toml")
        assert settings.observability.log_format == "json"

    def test_toml_file(self, tmp_path):
        config = tmp_path / "wishin.toml"
        config.write_text(
            "[limits]\n"
            "max_items_per_wishlist = 20\n"
            "\n"
            "[observability]\n"
            'log_format = "console"\n'
        )
        settings = load_settings(config)
        assert settings.limits.max_items_per_wishlist == 20
        assert settings.limits.item_name_min == 3
        assert settings.observability.log_format == "console"

    def test_overrides_win(self, tmp_path):
        config = tmp_path / "wishin.toml"
        config.write_text('[observability]\nlog_level = "WARNING"\n')
        settings = load_settings(config, overrides={"observability": {"log_level": "ERROR"}})
        assert settings.observability.log_level == "ERROR"

    def test_invalid_toml(self, tmp_path):
        config = tmp_path / "broken.toml"
        config.write_text("[limits\nmax_items = = 3\n")
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_settings(config)
