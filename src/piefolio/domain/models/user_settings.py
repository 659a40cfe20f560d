"""Per-user portfolio settings."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class UserSettings:
    """Inputs the upstream portfolio request is built from."""

    user_id: str
    country: str
    currency: str
    monthly_budget: Decimal
    updated_at: Optional[datetime] = None
