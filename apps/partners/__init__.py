"""
Partners App - Business Partner Profiles and Approval Workflow

A partner is the business behind an offer. Every partner goes through an
admin approval gate (pending -> approved | rejected); only approved
partners can have coupons minted or redeemed against their offers.
"""
