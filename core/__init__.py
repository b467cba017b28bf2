"""
TierSeal core infrastructure: crypto protocol, ledger, event bus, guards.
"""
