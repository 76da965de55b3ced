"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``LEDGEROPS_``, nested via ``__``)
2. YAML config file (``LEDGEROPS_CONFIG_PATH`` env var or ``AppConfig.from_yaml``)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class DateRangePreset(enum.StrEnum):
    """Date range presets offered by the transaction views."""

    TODAY = "today"
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    CUSTOM = "custom"
    ALL = "all"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class LedgerConfig(BaseSettings):
    """Transaction ledger API settings."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGEROPS_LEDGER__",
        case_sensitive=False,
    )

    url: str = "https://transaction.movasafe.com"
    token: str = ""
    timeout: float = 30.0
    transactions_path: str = "/api/transactions/all"
    transaction_path: str = "/api/transactions"
    user_transactions_path: str = "/api/transactions/by-user"
    reversal_path: str = "/transactions"


class QueryConfig(BaseSettings):
    """Transaction query session settings."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGEROPS_QUERY__",
        case_sensitive=False,
    )

    default_page_size: int = Field(default=50, gt=0)
    default_date_range: DateRangePreset = DateRangePreset.LAST_7_DAYS
    residual_window_size: int = Field(
        default=1000,
        gt=0,
        description="Server page size requested while a client-only filter is active",
    )


class ReversalConfig(BaseSettings):
    """Reversal workflow settings."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGEROPS_REVERSAL__",
        case_sensitive=False,
    )

    force_permission: str = "FORCE_REVERSE_TRANSACTION"
    debt_due_days: int = Field(default=0, ge=0)


class TriageConfig(BaseSettings):
    """Failure triage settings."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGEROPS_TRIAGE__",
        case_sensitive=False,
    )

    taxonomy_path: str = ""
    related_window_hours: float = Field(default=24.0, gt=0)
    related_amount_tolerance: float = Field(default=0.10, ge=0)
    related_limit: int = Field(default=5, gt=0)


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level configuration for the transaction query and reversal engine.

    Loads settings from environment variables (``LEDGEROPS_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGEROPS_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    version: str = "0.1.0"
    default_currency: str = "RWF"
    config_path: str = ""

    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    reversal: ReversalConfig = Field(default_factory=ReversalConfig)
    triage: TriageConfig = Field(default_factory=TriageConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
