"""
TierSeal Tier Discount Engine
===============================
Confidential tiered policy evaluation: an encrypted score is run
through a program's three encrypted (threshold, discount) tiers and
only the submitting principal can decrypt the outcome.
"""
