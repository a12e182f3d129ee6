# hapibara/api/routers/impact.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hapibara.api.deps import current_user_id
from hapibara.data.database import get_db
from hapibara.domain.schemas import ActivityIn, ActivityOut, ApiResponse, ImpactOut, Timeframe
from hapibara.services.kindness_service import KindnessService
from hapibara.utils.settings import MAX_PAGE_SIZE

router = APIRouter(prefix="/impact", tags=["impact"])


def get_service(db: Session):
    return KindnessService(db)


@router.post("", response_model=ApiResponse[ActivityOut])
def log_activity(
    payload: ActivityIn,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    activity = get_service(db).log_activity(
        user_id,
        payload.activity_type,
        payload.model_dump(exclude={"activity_type"}),
    )
    return ApiResponse[ActivityOut](message="Activity logged successfully!", data=ActivityOut.model_validate(activity))


@router.get("", response_model=ApiResponse[ImpactOut])
def get_impact(
    timeframe: Timeframe = Query(Timeframe.ALL),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    impact = get_service(db).get_impact(user_id, timeframe=timeframe, page=page, limit=limit)
    return ApiResponse[ImpactOut](data=ImpactOut.model_validate(impact))
