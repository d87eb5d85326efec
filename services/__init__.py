"""
services/ - Business Logic Layer
=================================
Hadith search/normalization and the API cache. Services degrade on
failure (empty list / None) and log; they never talk to Telegram.
"""
