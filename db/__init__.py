"""
db/ - Database Layer
====================
PostgreSQL connection pool, schema bootstrap, and the `run_in_db` bridge
that lets async handlers call the blocking psycopg2 repositories.
Nothing in here imports from the higher layers.
"""
