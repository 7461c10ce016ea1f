"""
Customer schemas.
"""
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional


class CustomerCreate(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    shipping_address: Optional[str] = None
    country: Optional[str] = None


class CustomerResponse(BaseModel):
    id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    shipping_address: Optional[str] = None
    country: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
