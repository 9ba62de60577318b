"""Status report endpoints.

GET /api/stats/weekly - Day-bucketed event status counts reconstructed from lifecycle timestamps
"""

from datetime import date

from fastapi import APIRouter, Depends

from app.api.dependencies import get_report_service
from app.core.auth import require_auth
from app.domain.permissions import UserAuthority
from app.schemas.events import DayStatusBucketResponse
from app.services.report_service import ReportService

router = APIRouter()


@router.get("/weekly", response_model=list[DayStatusBucketResponse])
async def get_weekly_stats(
    start_date: date | None = None,
    end_date: date | None = None,
    _: UserAuthority = Depends(require_auth),
    service: ReportService = Depends(get_report_service),
) -> list[DayStatusBucketResponse]:
    """One entry per day of [start_date, end_date], ascending.

    Query params:
        start_date: First day (ISO date). Defaults to end_date minus six days.
        end_date: Last day (ISO date). Defaults to today in the report timezone.
    """
    buckets = await service.reconstruct_weekly(start_date, end_date)
    return [DayStatusBucketResponse.from_bucket(bucket) for bucket in buckets]
