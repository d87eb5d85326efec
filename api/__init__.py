"""
api/ - External HTTP clients
=============================
Thin async wrappers around third-party HTTP APIs (currently Dorar.net).
They only move bytes and translate transport failures into BotError
subclasses; normalization happens in services/.
"""
