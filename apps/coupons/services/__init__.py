"""
Coupons app services layer.

Minting and reads go through the ledger, consuming a coupon goes through
the redemption validator. Nothing else writes coupon rows.
"""

from .exceptions import (
    CouponsServiceError,
    CouponNotFoundError,
    OfferNotEligibleError,
    InvalidOfferStateError,
    InvalidTokenError,
    WrongPartnerError,
    CouponExpiredError,
    AlreadyRedeemedError,
    CodeGenerationError,
)

from .codes import (
    CODE_ALPHABET,
    generate_code,
    build_qr_payload,
    parse_qr_payload,
)

from .expiry import resolve_expiry

from .ledger import (
    expire_stale,
    mint_coupon,
    get_coupon,
    list_member_coupons,
    list_partner_coupons,
    list_partner_redemptions,
    get_member_coupon_stats,
)

from .redemption import (
    RedemptionResult,
    validate_token,
    validate_scan,
    redeem,
    redeem_by_scan,
)


__all__ = [
    # Exceptions
    'CouponsServiceError',
    'CouponNotFoundError',
    'OfferNotEligibleError',
    'InvalidOfferStateError',
    'InvalidTokenError',
    'WrongPartnerError',
    'CouponExpiredError',
    'AlreadyRedeemedError',
    'CodeGenerationError',

    # Code generator
    'CODE_ALPHABET',
    'generate_code',
    'build_qr_payload',
    'parse_qr_payload',

    # Expiry resolver
    'resolve_expiry',

    # Ledger
    'expire_stale',
    'mint_coupon',
    'get_coupon',
    'list_member_coupons',
    'list_partner_coupons',
    'list_partner_redemptions',
    'get_member_coupon_stats',

    # Redemption validator
    'RedemptionResult',
    'validate_token',
    'validate_scan',
    'redeem',
    'redeem_by_scan',
]
