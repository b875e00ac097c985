"""Coupon minting, the redemption ledger and QR scan redemption."""
