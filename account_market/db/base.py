"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - Decimal-typed mapped columns default to Numeric(10, 2)

Design Decisions:
    - Separate file for Base: avoids circular imports between models
"""

from decimal import Decimal

from sqlalchemy import Numeric
from sqlalchemy.orm import DeclarativeBase

MONEY = Numeric(10, 2, asdecimal=True)


class Base(DeclarativeBase):
    """Base class for all marketplace ORM models."""
    type_annotation_map = {Decimal: MONEY}
