"""
TierSeal Event Store — durable, hash-chained notification log (Django app).
"""
