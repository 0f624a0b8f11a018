# validation_wrapper.py
import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel

from email_checker import DisposableDomains

logger = logging.getLogger(__name__)

MISSING_EMAIL_MESSAGE = "Invalid input. Please provide an email in the request body."
BAD_FORMAT_MESSAGE = "Invalid email format."


class ErrorResponse(BaseModel):
    status: str = "error"
    message: str


class VerifyResponse(BaseModel):
    status: str
    message: str
    email: str
    domain: str
    is_disposable: bool


def extract_domain(email: str) -> Optional[str]:
    """Part after the first '@' (up to any second '@'), or None if empty."""
    parts = email.split("@")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def verify_email(payload: Any, domains: DisposableDomains) -> Tuple[int, Dict[str, Any]]:
    """Classify the email in a parsed request body.

    Returns (status_code, body). A domain missing from the list is reported
    as valid; there is no "unknown" outcome.
    """
    email = payload.get("email") if isinstance(payload, dict) else None
    if not email or not isinstance(email, str):
        logger.debug("Rejected verify request without an email")
        return 400, ErrorResponse(message=MISSING_EMAIL_MESSAGE).model_dump()

    domain = extract_domain(email)
    if domain is None:
        logger.debug("Rejected malformed email %r", email)
        return 400, ErrorResponse(message=BAD_FORMAT_MESSAGE).model_dump()

    if domains.contains(domain.lower()):
        res = VerifyResponse(
            status="invalid",
            message="Disposable or temporary email domain found.",
            email=email,
            domain=domain,
            is_disposable=True,
        )
    else:
        res = VerifyResponse(
            status="valid",
            message="Email domain appears to be valid.",
            email=email,
            domain=domain,
            is_disposable=False,
        )
    return 200, res.model_dump()
