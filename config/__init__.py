"""
TierSeal Django project configuration.
"""
