"""
Job health log model

One row per learning job run, used for the system health summary.
"""

from sqlalchemy import Column, String, Integer, DateTime, Text, Index, JSON

from uplift_worker.shared.helpers import now_utc
from .base import BaseModel, ShopMixin
from .enums import JobStatus


class JobHealthLog(BaseModel, ShopMixin):
    """Outcome and counters of a single learning job run"""

    __tablename__ = "ml_job_health_logs"

    job_type = Column(String(50), nullable=False)
    status = Column(String(20), default=JobStatus.RUNNING.value, nullable=False)
    started_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    duration_ms = Column(Integer, nullable=True)
    records_processed = Column(Integer, default=0, nullable=False)
    records_created = Column(Integer, default=0, nullable=False)
    records_updated = Column(Integer, default=0, nullable=False)
    error_count = Column(Integer, default=0, nullable=False)
    error_message = Column(Text, nullable=True)
    triggered_by = Column(String(50), default="cron", nullable=False)
    job_metadata = Column(JSON, nullable=True)

    __table_args__ = (
        Index(
            "ix_ml_job_health_logs_shop_id_job_type_started_at",
            "shop_id",
            "job_type",
            "started_at",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<JobHealthLog(shop_id={self.shop_id}, job_type={self.job_type}, "
            f"status={self.status})>"
        )
