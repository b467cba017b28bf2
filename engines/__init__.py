"""
TierSeal engines.
"""
