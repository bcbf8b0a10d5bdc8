"""Database Declarations — SQLAlchemy declarative Base shared by every model.

Invariants:
    - All models inherit from Base
    - Engines and sessions live in infrastructure/database.py, not here
"""
