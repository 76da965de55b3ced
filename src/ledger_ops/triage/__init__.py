"""Triage — failure classification and related-failure correlation."""

from ledger_ops.triage.classifier import (
    DEFAULT_TAXONOMY,
    FailureInfo,
    FailureRule,
    FailureTaxonomy,
    classify,
    load_taxonomy,
)
from ledger_ops.triage.correlator import find_related, find_related_with_config

__all__ = [
    "DEFAULT_TAXONOMY",
    "FailureInfo",
    "FailureRule",
    "FailureTaxonomy",
    "classify",
    "find_related",
    "find_related_with_config",
    "load_taxonomy",
]
