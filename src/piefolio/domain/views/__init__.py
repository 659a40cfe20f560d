"""View models for service outputs."""

from piefolio.domain.views.allocation import (
    AllocationLine,
    RebalanceLine,
    AllocationReport,
)

__all__ = [
    "AllocationLine",
    "RebalanceLine",
    "AllocationReport",
]
