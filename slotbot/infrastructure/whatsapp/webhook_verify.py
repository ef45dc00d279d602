from __future__ import annotations

import hmac
import logging


logger = logging.getLogger(__name__)


def verify_subscription(mode: str | None, token: str | None, challenge: str | None, expected_token: str) -> str | None:
    """Meta hub verification. Returns the challenge to echo back, or None."""
    if mode == "subscribe" and token and expected_token and hmac.compare_digest(token, expected_token):
        return challenge or ""
    return None


def verify_post_signature(body: bytes, signature_header: str | None, app_secret: str | None, env: str) -> bool:
    if not signature_header:
        if env.lower() in {"dev", "local"}:
            logger.warning("Missing signature header; accepting in dev mode")
            return True
        return False

    if not app_secret:
        logger.error("Missing app secret for signature verification")
        return False

    algo, _, signature = signature_header.partition("=")
    if algo.lower() != "sha256" or not signature:
        return False

    expected = hmac.new(app_secret.encode("utf-8"), body, "sha256").hexdigest()
    return hmac.compare_digest(expected, signature)
