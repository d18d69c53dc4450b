"""Caller identity from App Service authentication (Easy Auth) headers.

The platform validates the session and forwards the principal as
``X-MS-CLIENT-PRINCIPAL-ID`` / ``-NAME`` plus a base64 JSON document of claims
in ``X-MS-CLIENT-PRINCIPAL``.
"""
import base64
import binascii
import json
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel

from src.specs.common.errors import UnauthenticatedError

PRINCIPAL_HEADER = "x-ms-client-principal"
PRINCIPAL_ID_HEADER = "x-ms-client-principal-id"
PRINCIPAL_NAME_HEADER = "x-ms-client-principal-name"

EMAIL_CLAIM_TYPES = (
    "emails",
    "email",
    "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/emailaddress",
    "preferred_username",
)


class CallerContext(BaseModel):
    userId: str
    email: Optional[str] = None


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _decode_principal(encoded: Optional[str]) -> Dict[str, Any]:
    if not encoded:
        return {}
    try:
        decoded = base64.b64decode(encoded + "=" * (-len(encoded) % 4))
        principal = json.loads(decoded)
    except (binascii.Error, ValueError):
        return {}
    return principal if isinstance(principal, dict) else {}


def _looks_like_email(value: Optional[str]) -> bool:
    return bool(value) and "@" in value


def _email_from_claims(claims: List[Dict[str, Any]]) -> Optional[str]:
    by_type: Dict[str, str] = {}
    for claim in claims:
        if isinstance(claim, dict) and claim.get("typ") and claim.get("val"):
            by_type.setdefault(claim["typ"], claim["val"])
    for claim_type in EMAIL_CLAIM_TYPES:
        value = by_type.get(claim_type)
        if _looks_like_email(value):
            return value
    return None


def get_caller_context(headers: Mapping[str, str]) -> CallerContext:
    """Build the caller context, or raise UnauthenticatedError when there is none."""
    principal = _decode_principal(_header(headers, PRINCIPAL_HEADER))
    claims = principal.get("claims") or []

    user_id = _header(headers, PRINCIPAL_ID_HEADER) or principal.get("userId")
    if not user_id:
        raise UnauthenticatedError()

    email = _email_from_claims(claims if isinstance(claims, list) else [])
    if email is None:
        name = _header(headers, PRINCIPAL_NAME_HEADER) or principal.get("userDetails")
        email = name if _looks_like_email(name) else None

    return CallerContext(userId=user_id, email=email)
