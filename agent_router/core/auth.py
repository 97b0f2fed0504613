"""Shared-secret gatekeeper for the protected routes."""
from __future__ import annotations

import hmac

GOVERNOR_KEY_HEADER = "X-GOVERNOR-KEY"


class SharedSecretGatekeeper:
    """Accepts a request only when its key equals the configured secret."""

    def __init__(self, secret: str) -> None:
        self._secret = secret.encode("utf-8")

    def is_authorized(self, key: str | None) -> bool:
        if key is None:
            return False
        return hmac.compare_digest(key.encode("utf-8"), self._secret)
