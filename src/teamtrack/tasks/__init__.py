"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskPriority)
- task_store.py: SQLite-backed storage + query helpers
- task_lifecycle.py: status transitions and their statistics side effects
- task_api.py: create/update/delete/list operations used by connectors
"""
