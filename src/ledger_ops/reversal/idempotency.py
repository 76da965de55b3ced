"""Idempotency keys for reversal submissions."""

from __future__ import annotations

import uuid
from collections.abc import Callable

IdempotencyKeyGenerator = Callable[[], str]


def generate_idempotency_key() -> str:
    """Return a fresh random UUID4 string (drawn from ``os.urandom``)."""
    return str(uuid.uuid4())
