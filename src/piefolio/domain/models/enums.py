"""Enumerations for domain models."""

from enum import Enum


class InstrumentType(str, Enum):
    """Kinds of instruments a pie can hold."""

    STOCK = "stock"
    FUND = "fund"
