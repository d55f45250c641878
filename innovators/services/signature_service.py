import hashlib
import hmac
import time
from typing import Optional

from innovators.logging_config import get_logger

logger = get_logger("signature_service")

SIGNATURE_VERSION = "v0"
DEFAULT_MAX_AGE_SECONDS = 300


def compute_slack_signature(signing_secret: str, timestamp: str, body: bytes | str) -> str:
    """Build the `v0=<hex>` signature Slack sends for a request body."""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    base_string = f"{SIGNATURE_VERSION}:{timestamp}:{body}"
    digest = hmac.new(signing_secret.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_slack_signature(
    signing_secret: str,
    timestamp: Optional[str],
    body: bytes | str,
    signature: Optional[str],
    *,
    max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
    now: Optional[float] = None,
) -> bool:
    if not signing_secret:
        logger.error("SLACK_SIGNING_SECRET not configured")
        return False
    if not timestamp or not signature:
        return False

    try:
        ts = int(timestamp)
    except (TypeError, ValueError):
        return False

    now_ts = int(now if now is not None else time.time())
    if abs(now_ts - ts) > max_age_seconds:
        logger.warning("Slack signature timestamp outside replay window", extra={"context": {"age": now_ts - ts}})
        return False

    expected = compute_slack_signature(signing_secret, timestamp, body)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
