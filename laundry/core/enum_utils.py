"""
Enum Utilities for VARCHAR-based Status Fields

STORAGE CONVENTION:
━━━━━━━━━━━━━━━━━━━
• Database: VARCHAR(20) - NOT a database ENUM type
• SQLAlchemy: String(20) with Mapped[str]
• Pydantic: Python Enum for API validation
• Case: All enum values stored in lowercase ("in_progress", "paid")

DATA FLOW:
━━━━━━━━━━
INPUT (API Request):
    Pydantic Enum → .value → String → Database
    Example: OrderStatus.IN_PROGRESS → "in_progress" → VARCHAR

OUTPUT (API Response):
    Database → String → Return directly
"""

from enum import Enum
from typing import Any, Optional


def get_enum_value(value: Any) -> Optional[str]:
    """
    Safely get string value from an enum or string.

    Examples:
        >>> get_enum_value(OrderStatus.PENDING)  # Pydantic input
        'pending'
        >>> get_enum_value("pending")  # Database value
        'pending'
        >>> get_enum_value(None)
        None
    """
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    return str(value)
