"""
Coupon code and redemption token generation.

coupon_code is short and human readable, for a partner typing it in or a
member reading it aloud. redemption_token is long, url-safe and only ever
travels inside the QR payload.
"""

import json
import logging
import secrets
from typing import Optional, Tuple

from django.conf import settings

from apps.coupons.models import Coupon

from .exceptions import CodeGenerationError, InvalidTokenError

logger = logging.getLogger(__name__)

# No 0/O, 1/I/L
CODE_ALPHABET = 'ABCDEFGHJKMNPQRSTUVWXYZ23456789'
TOKEN_BYTES = 32


def _random_code(length: int) -> str:
    return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def generate_code() -> Tuple[str, str]:
    """
    Draw an unused coupon code and a fresh redemption token.

    The code is checked against every coupon ever issued, whatever its
    status. Nothing is written here: the unique indexes still have the
    final say when the coupon row is inserted.

    Returns:
        (coupon_code, redemption_token)

    Raises:
        CodeGenerationError: If every attempt collided
    """
    length = settings.COUPON_CODE_LENGTH
    max_attempts = settings.COUPON_CODE_MAX_ATTEMPTS

    for _ in range(max_attempts):
        code = _random_code(length)
        if not Coupon.objects.filter(coupon_code=code).exists():
            return code, generate_token()

    logger.error(
        "Could not draw an unused coupon code in %d attempts (length=%d)",
        max_attempts, length
    )
    raise CodeGenerationError(
        f"Failed to generate a unique coupon code after {max_attempts} attempts"
    )


def build_qr_payload(coupon: Coupon) -> str:
    """Compact JSON carried by the coupon's QR code."""
    return json.dumps(
        {'cid': str(coupon.id), 'tok': coupon.redemption_token},
        separators=(',', ':')
    )


def parse_qr_payload(payload: str) -> Tuple[Optional[str], str]:
    """
    Split a scanned QR payload into (coupon_id, redemption_token).

    Accepts the JSON form produced by build_qr_payload or a bare token,
    in which case coupon_id is None.

    Raises:
        InvalidTokenError: If the payload is empty or malformed
    """
    payload = (payload or '').strip()
    if not payload:
        raise InvalidTokenError("Empty QR payload")

    if not payload.startswith('{'):
        return None, payload

    try:
        data = json.loads(payload)
    except ValueError:
        raise InvalidTokenError("Malformed QR payload")

    if not isinstance(data, dict):
        raise InvalidTokenError("Malformed QR payload")

    token = data.get('tok')
    coupon_id = data.get('cid')
    if not isinstance(token, str) or not token:
        raise InvalidTokenError("QR payload has no redemption token")
    if coupon_id is not None and not isinstance(coupon_id, str):
        raise InvalidTokenError("Malformed QR payload")
    return coupon_id, token
