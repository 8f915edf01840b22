"""
User subsystem.

Components:
- user_models.py: data structures (User, UserRole, Achievement)
- user_store.py: SQLite-backed identity store
- user_api.py: registration and member approval operations
"""
