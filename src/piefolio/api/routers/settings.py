"""User settings endpoints."""

from fastapi import APIRouter, Depends

from piefolio.api.deps import get_settings_service, get_user_id
from piefolio.api.rate_limit import api_rate_limit, auth_rate_limit
from piefolio.api.schemas import SettingsResponse, SettingsUpdateRequest
from piefolio.domain.models import UserSettings
from piefolio.services import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"], dependencies=[Depends(api_rate_limit)])


def _to_response(settings: UserSettings) -> SettingsResponse:
    return SettingsResponse(
        user_id=settings.user_id,
        country=settings.country,
        currency=settings.currency,
        monthly_budget=settings.monthly_budget,
        updated_at=settings.updated_at,
    )


@router.get("", response_model=SettingsResponse)
def get_user_settings(
    user_id: str = Depends(get_user_id),
    service: SettingsService = Depends(get_settings_service),
) -> SettingsResponse:
    """Get the user's settings (configured defaults when none are stored)."""
    return _to_response(service.get_settings(user_id))


@router.put("", response_model=SettingsResponse, dependencies=[Depends(auth_rate_limit)])
def update_user_settings(
    data: SettingsUpdateRequest,
    user_id: str = Depends(get_user_id),
    service: SettingsService = Depends(get_settings_service),
) -> SettingsResponse:
    """Update country, currency and/or monthly budget."""
    return _to_response(
        service.update_settings(
            user_id,
            country=data.country,
            currency=data.currency,
            monthly_budget=data.monthly_budget,
        )
    )
