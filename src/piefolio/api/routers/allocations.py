"""Target allocation endpoints."""

from decimal import Decimal

from fastapi import APIRouter, Depends

from piefolio.api.deps import get_allocation_service, get_user_id
from piefolio.api.rate_limit import api_rate_limit
from piefolio.api.schemas import TargetsReplaceRequest, TargetsResponse, TargetUpdateRequest
from piefolio.services import AllocationService

router = APIRouter(prefix="/allocations", tags=["allocations"], dependencies=[Depends(api_rate_limit)])


def _to_response(targets: dict[str, Decimal]) -> TargetsResponse:
    return TargetsResponse(
        targets=targets,
        total_percentage=sum(targets.values(), Decimal("0")),
    )


@router.get("", response_model=TargetsResponse)
def list_targets(
    user_id: str = Depends(get_user_id),
    service: AllocationService = Depends(get_allocation_service),
) -> TargetsResponse:
    """List the user's stored target percentages."""
    return _to_response(service.get_targets(user_id))


@router.put("", response_model=TargetsResponse)
def replace_targets(
    data: TargetsReplaceRequest,
    user_id: str = Depends(get_user_id),
    service: AllocationService = Depends(get_allocation_service),
) -> TargetsResponse:
    """Replace every stored target of the user."""
    return _to_response(service.replace_targets(user_id, data.targets))


@router.put("/{pie_name}", response_model=TargetsResponse)
def set_target(
    pie_name: str,
    data: TargetUpdateRequest,
    user_id: str = Depends(get_user_id),
    service: AllocationService = Depends(get_allocation_service),
) -> TargetsResponse:
    """Set the target for one pie."""
    return _to_response(service.set_target(user_id, pie_name, data.target_percentage))


@router.delete("/{pie_name}", status_code=204)
def delete_target(
    pie_name: str,
    user_id: str = Depends(get_user_id),
    service: AllocationService = Depends(get_allocation_service),
) -> None:
    """Delete the target for one pie."""
    service.delete_target(user_id, pie_name)
