"""Admin API routes: manual lifecycle sweep triggers."""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_scheduler
from app.core.auth import require_admin
from app.domain.permissions import UserAuthority
from app.jobs.scheduler import LifecycleScheduler
from app.jobs.sweeps import SweepKind
from app.schemas.events import SweepResultResponse

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/sweeps/{kind}", response_model=SweepResultResponse)
async def trigger_sweep(
    kind: SweepKind,
    _: UserAuthority = Depends(require_admin),
    scheduler: LifecycleScheduler = Depends(get_scheduler),
) -> SweepResultResponse:
    """Run a sweep immediately. Reports ran=false if one of the same kind is in flight."""
    result = await scheduler.trigger(kind)
    if result is None:
        return SweepResultResponse(sweep=kind.value, ran=False)
    return SweepResultResponse(
        sweep=kind.value,
        ran=True,
        selected=result.selected,
        transitioned=result.transitioned,
        skipped=result.skipped,
        failed=result.failed,
    )
