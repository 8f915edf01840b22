"""
Performance subsystem.

Components:
- accountant.py: per-user aggregates updated on lifecycle edges
- achievements.py: declarative badge rules + granting
- analytics.py: read-only per-user statistics
"""
