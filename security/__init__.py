"""
security/ - Session gate and rate limiting applied to every update.
"""
