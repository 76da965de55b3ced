"""Failure classifier — maps a failed transaction to a category and retry verdict.

Categories evolve with the ledger, so the mapping is data: a versioned
``FailureTaxonomy`` of keyword rules, loadable from YAML. Rules are tried
in order; the first whose keyword appears in the description wins.

YAML shape::

    version: "2"
    default: {category: Unknown Error, retry_eligible: true}
    rules:
      - {keywords: [insufficient, balance], category: Insufficient Funds, retry_eligible: false}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ledger_ops.ledger.models import TransactionStatus

NOT_APPLICABLE = "N/A"


@dataclass(frozen=True)
class FailureInfo:
    """Classification of one transaction."""

    category: str
    retry_eligible: bool


@dataclass(frozen=True)
class FailureRule:
    """Keywords (matched case-insensitively) that select a category."""

    keywords: tuple[str, ...]
    category: str
    retry_eligible: bool

    def matches(self, description: str) -> bool:
        """Whether any keyword occurs in the lower-cased description."""
        return any(keyword in description for keyword in self.keywords)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FailureRule:
        """Create a rule from its YAML/dict form."""
        return cls(
            keywords=tuple(str(k).lower() for k in data.get("keywords", [])),
            category=str(data["category"]),
            retry_eligible=bool(data.get("retry_eligible", False)),
        )


@dataclass(frozen=True)
class FailureTaxonomy:
    """Versioned, ordered failure mapping table."""

    version: str
    rules: tuple[FailureRule, ...] = ()
    default: FailureInfo = field(default_factory=lambda: FailureInfo("Unknown Error", True))

    def classify(self, status: TransactionStatus | str, description: str | None) -> FailureInfo:
        """Classify a transaction; anything not FAILED is ``N/A``."""
        if TransactionStatus.from_string(status) is not TransactionStatus.FAILED:
            return FailureInfo(NOT_APPLICABLE, False)
        desc = (description or "").lower()
        for rule in self.rules:
            if rule.matches(desc):
                return FailureInfo(rule.category, rule.retry_eligible)
        return self.default

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FailureTaxonomy:
        """Create a taxonomy from its YAML/dict form."""
        default = data.get("default") or {}
        return cls(
            version=str(data.get("version", "")),
            rules=tuple(FailureRule.from_dict(rule) for rule in data.get("rules", [])),
            default=FailureInfo(
                category=str(default.get("category", "Unknown Error")),
                retry_eligible=bool(default.get("retry_eligible", True)),
            ),
        )


DEFAULT_TAXONOMY = FailureTaxonomy(
    version="1",
    rules=(
        FailureRule(("insufficient", "balance"), "Insufficient Funds", False),
        FailureRule(("timeout", "network"), "Network Error", True),
        FailureRule(("invalid", "validation"), "Validation Error", False),
        FailureRule(("provider", "gateway"), "Provider Error", True),
    ),
)


def load_taxonomy(path: str | Path | None) -> FailureTaxonomy:
    """Load a taxonomy from YAML, falling back to the built-in table.

    Returns ``DEFAULT_TAXONOMY`` when no path is given or the file is
    missing or empty.
    """
    if not path:
        return DEFAULT_TAXONOMY
    p = Path(path)
    if not p.exists():
        return DEFAULT_TAXONOMY
    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        return DEFAULT_TAXONOMY
    return FailureTaxonomy.from_dict(data)


def classify(
    status: TransactionStatus | str,
    description: str | None,
    taxonomy: FailureTaxonomy = DEFAULT_TAXONOMY,
) -> FailureInfo:
    """Classify a transaction with ``taxonomy``."""
    return taxonomy.classify(status, description)
