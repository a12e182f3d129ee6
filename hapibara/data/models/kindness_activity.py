from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, Text, DateTime, Float

from hapibara.data.database import Base


class KindnessActivityModel(Base):
    """Append-only log entry; the running total lives on users.kindness_score."""

    __tablename__ = "kindness_activities"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    activity_type = Column(String(30), nullable=False)  # recipe_cooked, product_bought, event_attended, friend_referred
    points = Column(Integer, nullable=False)

    water_saved = Column(Float, nullable=False, default=0)  # litry
    co2_reduced = Column(Float, nullable=False, default=0)  # kg
    animals_spared = Column(Float, nullable=False, default=0)

    related_id = Column(Integer, nullable=True)  # id przepisu / produktu / eventu
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
