"""
Job health logging

Every learning job run writes one JobHealthLog row (running, then success,
partial or failed). JobHealthService turns those rows into the system health
summary served to the dashboard.
"""

from collections import defaultdict
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from uplift_worker.core.database.models import JobHealthLog, JobStatus
from uplift_worker.core.database.session import (
    SessionFactory,
    get_session_context,
    get_transaction_context,
)
from uplift_worker.core.logging import get_logger
from uplift_worker.repository import JobHealthLogRepository
from uplift_worker.shared.helpers import now_utc

logger = get_logger(__name__)

HEALTHY = "healthy"
DEGRADED = "degraded"
CRITICAL = "critical"

RECENT_LOG_FIELDS = (
    "id",
    "shop_id",
    "job_type",
    "status",
    "started_at",
    "completed_at",
    "duration_ms",
    "records_processed",
    "records_created",
    "records_updated",
    "error_count",
    "error_message",
    "triggered_by",
)


class JobHealthLogger:
    """Tracks a single job run in ml_job_health_logs"""

    def __init__(
        self,
        shop_id: str,
        job_type: str,
        triggered_by: str = "cron",
        session_factory: Optional[SessionFactory] = None,
    ):
        self.shop_id = shop_id
        self.job_type = job_type
        self.triggered_by = triggered_by
        self.session_factory = session_factory
        self.log_id: Optional[str] = None
        self.started_at = None

    async def start(self) -> "JobHealthLogger":
        self.started_at = now_utc()
        try:
            async with get_transaction_context(self.session_factory) as session:
                row = JobHealthLog(
                    shop_id=self.shop_id,
                    job_type=self.job_type,
                    status=JobStatus.RUNNING.value,
                    started_at=self.started_at,
                    triggered_by=self.triggered_by,
                )
                session.add(row)
                await session.flush()
                self.log_id = row.id
        except SQLAlchemyError as e:
            # the job still runs without a health row
            logger.warning(
                "Failed to start job health log",
                shop_id=self.shop_id,
                job_type=self.job_type,
                error=str(e),
            )
        return self

    async def success(self, **counters: Any) -> None:
        await self._finish(JobStatus.SUCCESS.value, **counters)

    async def partial(self, **counters: Any) -> None:
        await self._finish(JobStatus.PARTIAL.value, **counters)

    async def failure(self, error: BaseException, **counters: Any) -> None:
        counters.setdefault("error_count", 1)
        await self._finish(JobStatus.FAILED.value, error_message=str(error), **counters)

    async def finish(self, status: str, **counters: Any) -> None:
        """Close the run with an explicit status"""
        await self._finish(status, **counters)

    async def _finish(
        self,
        status: str,
        records_processed: int = 0,
        records_created: int = 0,
        records_updated: int = 0,
        error_count: int = 0,
        error_message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self.log_id is None:
            return

        completed_at = now_utc()
        duration_ms = int((completed_at - self.started_at).total_seconds() * 1000)
        try:
            async with get_transaction_context(self.session_factory) as session:
                row = await session.get(JobHealthLog, self.log_id)
                if row is None:
                    return
                row.status = status
                row.completed_at = completed_at
                row.duration_ms = duration_ms
                row.records_processed = records_processed
                row.records_created = records_created
                row.records_updated = records_updated
                row.error_count = error_count
                row.error_message = error_message
                row.job_metadata = metadata
        except SQLAlchemyError as e:
            logger.warning(
                "Failed to complete job health log",
                shop_id=self.shop_id,
                job_type=self.job_type,
                log_id=self.log_id,
                error=str(e),
            )


async def start_health_log(
    shop_id: str,
    job_type: str,
    triggered_by: str = "cron",
    session_factory: Optional[SessionFactory] = None,
) -> JobHealthLogger:
    """Create and start a JobHealthLogger"""
    return await JobHealthLogger(shop_id, job_type, triggered_by, session_factory).start()


def health_score(total_runs: int, failed_runs: int, total_errors: int) -> int:
    """0-100, where failures weigh 50 points and errors 10 points per run"""
    if total_runs == 0:
        return 100
    score = 100 - (failed_runs / total_runs * 50) - (total_errors / total_runs * 10)
    return round(max(0.0, min(100.0, score)))


def system_status(total_runs: int, failed_runs: int) -> str:
    failure_ratio = failed_runs / max(total_runs, 1)
    if failure_ratio > 0.5:
        return CRITICAL
    if failure_ratio > 0.2:
        return DEGRADED
    return HEALTHY


def _average(values: List[int]) -> float:
    return sum(values) / len(values) if values else 0.0


class JobHealthService:
    """Aggregates job health logs into a dashboard summary"""

    def __init__(self, session_factory: Optional[SessionFactory] = None):
        self.session_factory = session_factory

    async def get_recent_logs(
        self, shop_id: Optional[str] = None, days: int = 7, limit: Optional[int] = None
    ) -> List[JobHealthLog]:
        since = now_utc() - timedelta(days=days)
        async with get_session_context(self.session_factory) as session:
            return await JobHealthLogRepository(session).list_since(
                since, shop_id=shop_id, limit=limit
            )

    async def get_health_summary(
        self, shop_id: Optional[str] = None, days: int = 7, recent_limit: int = 50
    ) -> Dict[str, Any]:
        """
        Health score, status and per-job-type stats for the last `days` days.

        Args:
            shop_id: Restrict to one shop, or None for the whole worker
            days: Look-back period
            recent_limit: Number of most recent runs to include
        """
        logs = await self.get_recent_logs(shop_id, days)

        total = len(logs)
        successful = sum(1 for log in logs if log.status == JobStatus.SUCCESS.value)
        failed = sum(1 for log in logs if log.status == JobStatus.FAILED.value)
        partial = sum(1 for log in logs if log.status == JobStatus.PARTIAL.value)
        total_errors = sum(log.error_count or 0 for log in logs)
        durations = [log.duration_ms for log in logs if log.duration_ms is not None]

        by_job_type: Dict[str, List[JobHealthLog]] = defaultdict(list)
        for log in logs:
            by_job_type[log.job_type].append(log)

        job_stats = []
        for job_type in sorted(by_job_type):
            job_logs = by_job_type[job_type]
            runs = len(job_logs)
            errors = sum(log.error_count or 0 for log in job_logs)
            job_stats.append(
                {
                    "job_type": job_type,
                    "runs": runs,
                    "errors": errors,
                    "avg_duration_ms": round(
                        _average(
                            [j.duration_ms for j in job_logs if j.duration_ms is not None]
                        )
                    ),
                    "error_rate": round(errors / runs * 100) if runs else 0,
                }
            )

        return {
            "health": {
                "score": health_score(total, failed, total_errors),
                "status": system_status(total, failed),
                "last_checked": now_utc().isoformat(),
            },
            "summary": {
                "period_days": days,
                "total_runs": total,
                "successful": successful,
                "failed": failed,
                "partial": partial,
                "total_errors": total_errors,
                "avg_duration_ms": round(_average(durations)),
                "success_rate": round(successful / total * 100) if total else 100,
            },
            "by_job_type": job_stats,
            "recent_logs": [self._serialize(log) for log in logs[:recent_limit]],
        }

    @staticmethod
    def _serialize(log: JobHealthLog) -> Dict[str, Any]:
        data = log.to_dict()
        return {key: data.get(key) for key in RECENT_LOG_FIELDS}
