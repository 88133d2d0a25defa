"""Enterprise configuration and application settings."""
import json
import logging
import os
import re
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, List, Optional

from dotenv import dotenv_values

from registrant_reports.models.tenant import (
    DEFAULT_TTL_SECONDS,
    Organization,
    SheetConfig,
    TenantConfig,
)
from registrant_reports.services.storage_service import load_json
from registrant_reports.utils.exceptions import TenantConfigMissingError
from registrant_reports.utils.validation import validate_enterprise_code

logger = logging.getLogger(__name__)

SETTING_KEYS = {
    "REPORTS_CACHE_DIR",
    "REPORTS_CONFIG_DIR",
    "GOOGLE_API_KEY",
    "GOOGLE_APPLICATION_CREDENTIALS",
}

_ENV_LOADED = False
_ENV_LOCK = Lock()


def _load_env(env_path: str = ".env") -> None:
    """Copy known settings from a .env file into the environment, never overriding it."""
    global _ENV_LOADED

    with _ENV_LOCK:
        if _ENV_LOADED:
            return

        if os.path.exists(env_path):
            for key, value in dotenv_values(env_path).items():
                if key in SETTING_KEYS and value is not None and key not in os.environ:
                    os.environ[key] = value

        _ENV_LOADED = True


@dataclass
class Settings:
    """Process-wide settings resolved from the environment."""

    cache_dir: str = "cache"
    config_dir: str = "config"
    google_api_key: Optional[str] = None
    service_account_file: Optional[str] = None


def load_settings() -> Settings:
    """
    Resolve settings from environment variables and .env.

    Returns:
        Settings with defaults for anything unset
    """
    _load_env()
    return Settings(
        cache_dir=os.getenv("REPORTS_CACHE_DIR", "cache"),
        config_dir=os.getenv("REPORTS_CONFIG_DIR", "config"),
        google_api_key=os.getenv("GOOGLE_API_KEY") or None,
        service_account_file=os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or None,
    )


class TenantConfigProvider:
    """
    Loads enterprise configuration files.

    Layout::

        <config_dir>/<code>.json          enterprise settings
        <config_dir>/groups/<code>.json   optional {group: [organizations]}
    """

    def __init__(self, config_dir: str):
        self.config_dir = config_dir
        self._cache: Dict[str, TenantConfig] = {}

    def clear_cache(self) -> None:
        self._cache.clear()

    def get(self, code: str) -> TenantConfig:
        """
        Get configuration for an enterprise.

        Raises:
            InvalidEnterpriseCodeError: If the code is malformed
            TenantConfigMissingError: If no valid configuration exists
        """
        validate_enterprise_code(code)

        if code in self._cache:
            return self._cache[code]

        config_path = os.path.join(self.config_dir, f"{code}.json")
        try:
            data = load_json(config_path)
        except FileNotFoundError as e:
            raise TenantConfigMissingError(f"No configuration for enterprise {code}") from e
        except (json.JSONDecodeError, PermissionError) as e:
            logger.error(f"Unreadable configuration {config_path}: {e}")
            raise TenantConfigMissingError(f"Unreadable configuration for enterprise {code}") from e

        try:
            tenant = self._build(code, data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid configuration {config_path}: {e}")
            raise TenantConfigMissingError(f"Invalid configuration for enterprise {code}") from e

        self._cache[code] = tenant
        return tenant

    def available_codes(self) -> List[str]:
        """Enterprise codes with a configuration file, sorted."""
        if not os.path.isdir(self.config_dir):
            return []
        codes = []
        for entry in sorted(os.listdir(self.config_dir)):
            code, ext = os.path.splitext(entry)
            if ext == ".json" and re.match(r"^[a-z]{3,4}$", code):
                codes.append(code)
        return codes

    def organizations_for(self, code: str) -> List[Organization]:
        """Organizations of an enterprise as records."""
        return self.get(code).organization_records()

    def _load_groups(self, code: str, inline_groups: Any) -> Dict[str, List[str]]:
        groups_path = os.path.join(self.config_dir, "groups", f"{code}.json")
        if os.path.exists(groups_path):
            try:
                inline_groups = load_json(groups_path)
            except json.JSONDecodeError as e:
                raise ValueError(f"Malformed groups file {groups_path}") from e

        if not inline_groups:
            return {}
        if not isinstance(inline_groups, dict):
            raise ValueError("Groups must map group names to organization lists")
        return {str(group): [str(member) for member in members] for group, members in inline_groups.items()}

    def _build(self, code: str, data: Dict[str, Any]) -> TenantConfig:
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a JSON object")

        sheets = {
            name: SheetConfig(
                workbook_id=sheet["workbook_id"],
                sheet_name=sheet["sheet_name"],
                start_row=int(sheet.get("start_row", 2)),
            )
            for name, sheet in data.get("google_sheets", {}).items()
        }

        return TenantConfig(
            code=code,
            start_date=data["start_date"],
            display_name=data.get("display_name", ""),
            ttl_seconds=int(data.get("cache_ttl", DEFAULT_TTL_SECONDS)),
            organizations=list(data.get("organizations", [])),
            groups=self._load_groups(code, data.get("groups")),
            is_demo=bool(data.get("is_demo", False)),
            sheets=sheets,
            admin_organization=data.get("admin_organization"),
        )
