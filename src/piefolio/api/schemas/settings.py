"""Pydantic schemas for user settings endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class SettingsUpdateRequest(BaseModel):
    """Request schema for updating user settings. Omitted fields are kept."""

    country: Optional[str] = Field(None, min_length=2, max_length=8, description="Country code")
    currency: Optional[str] = Field(None, min_length=3, max_length=3, description="ISO currency code")
    monthly_budget: Optional[Decimal] = Field(None, ge=0, description="Monthly investment budget")


class SettingsResponse(BaseModel):
    """Response schema for user settings."""

    user_id: str
    country: str
    currency: str
    monthly_budget: Decimal
    updated_at: Optional[datetime] = None
