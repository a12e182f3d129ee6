# hapibara/services/kindness_service.py
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hapibara.data.models.kindness_activity import KindnessActivityModel
from hapibara.domain.errors import NotFoundError, PersistenceFailure, ValidationError
from hapibara.domain.schemas import ActivityType, Timeframe
from hapibara.repos.kindness_repo import KindnessRepo
from hapibara.repos.user_repo import UserRepo
from hapibara.utils.logging import get_logger
from hapibara.utils.retry import db_retry
from hapibara.utils.settings import MAX_PAGE_SIZE

logger = get_logger(__name__)

# tabela punktow, nie liczone
ACTIVITY_POINTS = {
    ActivityType.RECIPE_COOKED: 10,
    ActivityType.PRODUCT_BOUGHT: 5,
    ActivityType.EVENT_ATTENDED: 15,
    ActivityType.FRIEND_REFERRED: 25,
}

TIMEFRAME_WINDOWS = {
    Timeframe.WEEK: timedelta(days=7),
    Timeframe.MONTH: timedelta(days=30),
}


class KindnessService:
    """
    Kindness/impact ledger.
    Aktywnosci sa tylko dopisywane, kindness_score na userze to suma
    podbijana w tej samej transakcji co insert aktywnosci.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = KindnessRepo(db)
        self.users = UserRepo(db)

    def log_activity(self, user_id: int, activity_type: ActivityType, metrics: Dict[str, Any] | None = None):
        try:
            activity_type = ActivityType(activity_type)
        except ValueError:
            raise ValidationError("Invalid activity type") from None

        metrics = metrics or {}

        try:
            activity = self._log_activity_once(user_id, activity_type, metrics)
        except SQLAlchemyError as e:
            logger.error("Logging activity failed, rolled back", user_id=user_id, error=str(e))
            raise PersistenceFailure("Failed to log activity") from e

        logger.info(
            "Kindness activity logged",
            user_id=user_id,
            activity_type=activity_type.value,
            points=activity.points,
        )
        return activity

    @db_retry()
    def _log_activity_once(self, user_id: int, activity_type: ActivityType, metrics: Dict[str, Any]):
        points = ACTIVITY_POINTS[activity_type]

        if not self.users.exists(user_id):
            raise NotFoundError("User not found")

        try:
            activity = self.repo.add_activity(
                KindnessActivityModel(
                    user_id=user_id,
                    activity_type=activity_type.value,
                    points=points,
                    water_saved=metrics.get("water_saved", 0),
                    co2_reduced=metrics.get("co2_reduced", 0),
                    animals_spared=metrics.get("animals_spared", 0),
                    related_id=metrics.get("related_id"),
                    description=metrics.get("description"),
                )
            )

            self.users.increment_kindness_score(user_id, points)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return activity

    def get_impact(
        self,
        user_id: int,
        timeframe: Timeframe = Timeframe.ALL,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Recent activities in the timeframe plus all-time stats and a per-type breakdown."""
        if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError("Invalid pagination parameters")

        user = self.users.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")

        window = TIMEFRAME_WINDOWS.get(Timeframe(timeframe))
        since = datetime.now(timezone.utc) - window if window else None

        activities = self.repo.list_activities(user_id, since, offset=(page - 1) * limit, limit=limit)
        in_timeframe = self.repo.count_activities(user_id, since)
        totals = self.repo.totals(user_id)
        total_pages = math.ceil(in_timeframe / limit) if in_timeframe else 0

        return {
            "activities": activities,
            "stats": {
                "total_activities": totals.total_activities,
                "total_points": int(totals.total_points),
                "kindness_score": user.kindness_score,
                "impact": {
                    "water_saved": float(totals.water_saved),
                    "co2_reduced": float(totals.co2_reduced),
                    "animals_spared": float(totals.animals_spared),
                },
            },
            "breakdown": [
                {
                    "activity_type": row.activity_type,
                    "count": row.count,
                    "total_points": int(row.total_points),
                    "total_water_saved": float(row.total_water_saved),
                    "total_co2_reduced": float(row.total_co2_reduced),
                    "total_animals_spared": float(row.total_animals_spared),
                }
                for row in self.repo.breakdown(user_id)
            ],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": in_timeframe,
                "total_pages": total_pages,
                "has_more": page < total_pages,
            },
        }
