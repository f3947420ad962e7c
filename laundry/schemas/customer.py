from typing import Optional
from uuid import UUID

from laundry.schemas.base import BaseResponseSchema


class CustomerBrief(BaseResponseSchema):
    """Customer summary joined onto order responses."""
    id: int
    uuid: UUID
    name: str
    mobile: str
    email: Optional[str] = None
    customer_type: str
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None

