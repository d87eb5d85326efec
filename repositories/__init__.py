"""
repositories/ - Data Access Layer
==================================
Each repository encapsulates all SQL queries for one table (users,
hadiths, cache, user_analytics) and returns domain model objects.
Repositories are blocking; async code reaches them through db.run_in_db.
"""
