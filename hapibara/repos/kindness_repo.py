# hapibara/repos/kindness_repo.py
from datetime import datetime
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hapibara.data.models.kindness_activity import KindnessActivityModel


class KindnessRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_activity(self, activity: KindnessActivityModel) -> KindnessActivityModel:
        self.db.add(activity)
        self.db.flush()
        return activity

    def list_activities(
        self,
        user_id: int,
        since: datetime | None,
        offset: int,
        limit: int,
    ) -> List[KindnessActivityModel]:
        stmt = select(KindnessActivityModel).where(KindnessActivityModel.user_id == user_id)
        if since is not None:
            stmt = stmt.where(KindnessActivityModel.created_at >= since)

        stmt = (
            stmt.order_by(KindnessActivityModel.created_at.desc(), KindnessActivityModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def count_activities(self, user_id: int, since: datetime | None = None) -> int:
        stmt = select(func.count(KindnessActivityModel.id)).where(KindnessActivityModel.user_id == user_id)
        if since is not None:
            stmt = stmt.where(KindnessActivityModel.created_at >= since)
        return self.db.execute(stmt).scalar_one()

    def totals(self, user_id: int):
        """All-time aggregate row: count, points and impact sums."""
        return self.db.execute(
            select(
                func.count(KindnessActivityModel.id).label("total_activities"),
                func.coalesce(func.sum(KindnessActivityModel.points), 0).label("total_points"),
                func.coalesce(func.sum(KindnessActivityModel.water_saved), 0).label("water_saved"),
                func.coalesce(func.sum(KindnessActivityModel.co2_reduced), 0).label("co2_reduced"),
                func.coalesce(func.sum(KindnessActivityModel.animals_spared), 0).label("animals_spared"),
            ).where(KindnessActivityModel.user_id == user_id)
        ).one()

    def breakdown(self, user_id: int):
        return self.db.execute(
            select(
                KindnessActivityModel.activity_type,
                func.count(KindnessActivityModel.id).label("count"),
                func.coalesce(func.sum(KindnessActivityModel.points), 0).label("total_points"),
                func.coalesce(func.sum(KindnessActivityModel.water_saved), 0).label("total_water_saved"),
                func.coalesce(func.sum(KindnessActivityModel.co2_reduced), 0).label("total_co2_reduced"),
                func.coalesce(func.sum(KindnessActivityModel.animals_spared), 0).label("total_animals_spared"),
            )
            .where(KindnessActivityModel.user_id == user_id)
            .group_by(KindnessActivityModel.activity_type)
            .order_by(KindnessActivityModel.activity_type)
        ).all()
