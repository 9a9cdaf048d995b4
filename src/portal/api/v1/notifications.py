"""Dashboard notification counts (admin and staff)."""

from fastapi import APIRouter

from src.portal.api.dependencies import AdminOrStaffSession, NotificationServiceDep
from src.portal.schemas import NotificationCountsRead

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "/counts",
    response_model=NotificationCountsRead,
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Admin or staff role required"},
    },
)
async def get_notification_counts(
    session: AdminOrStaffSession, service: NotificationServiceDep
) -> NotificationCountsRead:
    """Pending-item counts for the dashboard badges."""
    counts = await service.fetch_notification_counts()
    return NotificationCountsRead(counts=counts, total=service.get_total_notifications())
