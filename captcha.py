"""
Google reCAPTCHA v3 verification
"""

import logging
from typing import Optional

import httpx

import config

logger = logging.getLogger(__name__)

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


def verify_captcha(token: Optional[str], remote_ip: Optional[str] = None) -> bool:
    """
    Verify a reCAPTCHA v3 token.

    Args:
        token: Token produced by grecaptcha.execute on the client
        remote_ip: Client IP address (optional)

    Returns:
        True when Google reports success with a score at or above
        RECAPTCHA_MIN_SCORE, or when no secret key is configured.
    """
    if not config.RECAPTCHA_SECRET_KEY:
        logger.warning("⚠️ RECAPTCHA_SECRET_KEY not configured - skipping CAPTCHA verification")
        return True

    if not token:
        logger.warning(f"❌ CAPTCHA token missing for IP: {remote_ip}")
        return False

    data = {"secret": config.RECAPTCHA_SECRET_KEY, "response": token}
    if remote_ip:
        data["remoteip"] = remote_ip

    try:
        response = httpx.post(RECAPTCHA_VERIFY_URL, data=data, timeout=10.0)
        result = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"❌ Error verifying CAPTCHA: {e}")
        return False

    score = result.get("score", 0.0)
    if result.get("success") is True and score >= config.RECAPTCHA_MIN_SCORE:
        logger.info(f"✅ CAPTCHA verified for IP: {remote_ip} (score={score})")
        return True

    logger.warning(
        f"❌ CAPTCHA rejected for IP: {remote_ip} - score={score}, errors={result.get('error-codes', [])}"
    )
    return False
