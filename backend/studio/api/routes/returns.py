"""Returns API endpoints.

POST /api/returns/check-overdue - Run the overdue returns follow-up batch now
"""

from fastapi import APIRouter

from studio.db.base import get_session_factory
from studio.schemas.returns import OverdueReturnsResponse
from studio.services.returns_service import ReturnsService

router = APIRouter()


@router.post("/check-overdue", response_model=OverdueReturnsResponse)
async def check_overdue_returns() -> OverdueReturnsResponse:
    """Create or escalate follow-up tasks for returns past their return date."""
    result = await ReturnsService(get_session_factory()).check_overdue_returns()
    return OverdueReturnsResponse(
        message=result.message,
        processed=result.processed,
        tasks_created=result.tasks_created,
        tasks_updated=result.tasks_updated,
        timestamp=result.timestamp,
    )
