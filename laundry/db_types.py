"""Database-agnostic type definitions for SQLAlchemy models.

This module provides type definitions that work with both SQLite and PostgreSQL.
"""
from sqlalchemy import Numeric, Uuid

# UUID type that works with both databases
# (native UUID on PostgreSQL, CHAR(32) on SQLite)
UUIDType = Uuid

# Money columns: 12 digits, 2 decimal places
MoneyType = Numeric(12, 2, asdecimal=True)

# Percentage columns: 0.00 - 100.00
PercentType = Numeric(5, 2, asdecimal=True)
