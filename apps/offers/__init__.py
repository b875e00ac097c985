"""
Offers App - Partner Discounts and Engagement Counters

An offer is a time-bounded discount published by an approved partner.
Each offer carries monotonic view/click/redemption counters that are only
ever changed through storage-level increments.
"""
