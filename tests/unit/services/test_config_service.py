"""Unit tests for enterprise configuration loading."""
import json
import os

import pytest

from registrant_reports.services import config_service
from registrant_reports.services.config_service import TenantConfigProvider, load_settings
from registrant_reports.utils.exceptions import (
    InvalidEnterpriseCodeError,
    TenantConfigMissingError,
)


@pytest.fixture
def config_dir(tmp_path):
    """Configuration directory with one enterprise and a groups file."""
    (tmp_path / "groups").mkdir()
    (tmp_path / "csu.json").write_text(json.dumps({
        "code": "csu",
        "display_name": "California State University",
        "start_date": "08-01-22",
        "cache_ttl": 600,
        "admin_organization": "Chancellor",
        "organizations": ["Chico", "Fresno"],
        "groups": {"Inline": ["Chico"]},
        "google_sheets": {
            "registrants": {"workbook_id": "wb1", "sheet_name": "Registrants"},
            "submissions": {"workbook_id": "wb2", "sheet_name": "Submissions", "start_row": 3},
        },
    }), encoding="utf-8")
    (tmp_path / "groups" / "csu.json").write_text(json.dumps({
        "North": ["Chico"],
        "Central": ["Fresno"],
    }), encoding="utf-8")
    return tmp_path


class TestTenantConfigProvider:
    """Test TenantConfigProvider."""

    def test_loads_configuration(self, config_dir):
        """Test every key is mapped onto TenantConfig."""
        tenant = TenantConfigProvider(str(config_dir)).get("csu")
        assert tenant.display_name == "California State University"
        assert tenant.ttl_seconds == 600
        assert tenant.organizations == ["Chico", "Fresno"]
        assert tenant.sheets["registrants"].start_row == 2
        assert tenant.sheets["submissions"].start_row == 3
        assert tenant.admin_organization == "Chancellor"
        assert tenant.is_demo is False

    def test_groups_file_overrides_inline(self, config_dir):
        """Test groups file wins and keeps declaration order."""
        tenant = TenantConfigProvider(str(config_dir)).get("csu")
        assert list(tenant.groups) == ["North", "Central"]

    def test_inline_groups_without_file(self, config_dir):
        """Test inline groups are used when no groups file exists."""
        (config_dir / "groups" / "csu.json").unlink()
        tenant = TenantConfigProvider(str(config_dir)).get("csu")
        assert tenant.groups == {"Inline": ["Chico"]}

    def test_missing_configuration(self, config_dir):
        """Test unknown enterprise raises TenantConfigMissingError."""
        with pytest.raises(TenantConfigMissingError):
            TenantConfigProvider(str(config_dir)).get("xyz")

    def test_invalid_code_rejected_before_lookup(self, config_dir):
        """Test malformed codes never reach the filesystem."""
        with pytest.raises(InvalidEnterpriseCodeError):
            TenantConfigProvider(str(config_dir)).get("../csu")

    def test_malformed_file(self, config_dir):
        """Test unreadable JSON is reported as missing configuration."""
        (config_dir / "bad.json").write_text("{", encoding="utf-8")
        with pytest.raises(TenantConfigMissingError, match="Unreadable"):
            TenantConfigProvider(str(config_dir)).get("bad")

    def test_invalid_values(self, config_dir):
        """Test invalid start_date is reported as invalid configuration."""
        (config_dir / "bad.json").write_text(json.dumps({"start_date": "2022-08-01"}), encoding="utf-8")
        with pytest.raises(TenantConfigMissingError, match="Invalid configuration"):
            TenantConfigProvider(str(config_dir)).get("bad")

    def test_results_cached(self, config_dir):
        """Test configuration is read once until the cache is cleared."""
        provider = TenantConfigProvider(str(config_dir))
        first = provider.get("csu")
        (config_dir / "csu.json").unlink()
        assert provider.get("csu") is first
        provider.clear_cache()
        with pytest.raises(TenantConfigMissingError):
            provider.get("csu")

    def test_demo_code_is_demo(self, config_dir):
        """Test demo enterprise is flagged from its code."""
        (config_dir / "demo.json").write_text(json.dumps({"start_date": "08-01-22"}), encoding="utf-8")
        assert TenantConfigProvider(str(config_dir)).get("demo").is_demo is True

    def test_available_codes(self, config_dir):
        """Test configuration files are listed by code."""
        (config_dir / "notes.txt").write_text("x", encoding="utf-8")
        (config_dir / "demo.json").write_text("{}", encoding="utf-8")
        assert TenantConfigProvider(str(config_dir)).available_codes() == ["csu", "demo"]

    def test_organizations_for(self, config_dir):
        """Test organization records include the admin organization first."""
        records = TenantConfigProvider(str(config_dir)).organizations_for("csu")
        assert [record.name for record in records] == ["Chancellor", "Chico", "Fresno"]


class TestLoadSettings:
    """Test load_settings."""

    def test_defaults(self, monkeypatch):
        """Test defaults when nothing is set."""
        monkeypatch.setattr(config_service, "_ENV_LOADED", True)
        for key in config_service.SETTING_KEYS:
            monkeypatch.delenv(key, raising=False)
        settings = load_settings()
        assert settings.cache_dir == "cache"
        assert settings.config_dir == "config"
        assert settings.google_api_key is None

    def test_environment(self, monkeypatch):
        """Test environment variables are used."""
        monkeypatch.setattr(config_service, "_ENV_LOADED", True)
        monkeypatch.setenv("REPORTS_CACHE_DIR", "/tmp/cache")
        monkeypatch.setenv("GOOGLE_API_KEY", "abc")
        settings = load_settings()
        assert settings.cache_dir == "/tmp/cache"
        assert settings.google_api_key == "abc"

    def test_env_file(self, monkeypatch, tmp_path):
        """Test .env values fill unset variables only."""
        env_file = tmp_path / ".env"
        env_file.write_text('REPORTS_CONFIG_DIR="/srv/config"\nREPORTS_CACHE_DIR=/ignored\nOTHER=1\n', encoding="utf-8")
        monkeypatch.setattr(config_service, "_ENV_LOADED", False)
        monkeypatch.delenv("REPORTS_CONFIG_DIR", raising=False)
        monkeypatch.setenv("REPORTS_CACHE_DIR", "/kept")
        monkeypatch.delenv("OTHER", raising=False)

        config_service._load_env(str(env_file))

        assert os.environ["REPORTS_CONFIG_DIR"] == "/srv/config"
        assert os.environ["REPORTS_CACHE_DIR"] == "/kept"
        assert "OTHER" not in os.environ
