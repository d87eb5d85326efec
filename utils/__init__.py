"""
utils/ - Cross-cutting helpers: logging, error taxonomy, update
inspection and background tasks.
"""
