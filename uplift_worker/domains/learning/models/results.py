"""
Result types for the learning pipeline

Per-item outcomes are explicit values collected in a BatchReport instead of
exceptions swallowed inside loops.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from uplift_worker.core.database.models import JobStatus


@dataclass(frozen=True)
class ItemSucceeded:
    key: str
    created: bool = False


@dataclass(frozen=True)
class ItemSkipped:
    key: str
    reason: str
    error: Optional[str] = None


SkippedItem = ItemSkipped
ItemResult = Union[ItemSucceeded, ItemSkipped]


@dataclass
class BatchReport:
    """Outcome of every item a batch step touched"""

    results: List[ItemResult] = field(default_factory=list)

    def succeeded(self, key: str, created: bool = False) -> ItemSucceeded:
        result = ItemSucceeded(key=key, created=created)
        self.results.append(result)
        return result

    def skipped(self, key: str, reason: str, error: Optional[BaseException] = None) -> ItemSkipped:
        result = ItemSkipped(key=key, reason=reason, error=str(error) if error else None)
        self.results.append(result)
        return result

    def extend(self, items: List[ItemResult]) -> None:
        self.results.extend(items)

    @property
    def successes(self) -> List[ItemSucceeded]:
        return [r for r in self.results if isinstance(r, ItemSucceeded)]

    @property
    def skips(self) -> List[ItemSkipped]:
        return [r for r in self.results if isinstance(r, ItemSkipped)]

    @property
    def created_count(self) -> int:
        return sum(1 for r in self.successes if r.created)

    @property
    def updated_count(self) -> int:
        return sum(1 for r in self.successes if not r.created)

    @property
    def status(self) -> str:
        """success when nothing was skipped, failed when nothing succeeded"""
        if not self.skips:
            return JobStatus.SUCCESS.value
        if not self.successes:
            return JobStatus.FAILED.value
        return JobStatus.PARTIAL.value

    def skip_reasons(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for skip in self.skips:
            counts[skip.reason] = counts.get(skip.reason, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "succeeded": len(self.successes),
            "skipped": len(self.skips),
            "skip_reasons": self.skip_reasons(),
        }


@dataclass
class EventStream:
    """Typed events of one query plus the rows that could not be parsed"""

    events: List[Any] = field(default_factory=list)
    skipped: List[ItemSkipped] = field(default_factory=list)

    def __iter__(self):
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def __bool__(self) -> bool:
        return bool(self.events)


@dataclass
class SimilarityComputationResult:
    pairs_evaluated: int = 0
    records_written: int = 0
    purchase_events: int = 0
    order_count: int = 0
    product_count: int = 0
    report: BatchReport = field(default_factory=BatchReport)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pairs_evaluated": self.pairs_evaluated,
            "records_written": self.records_written,
            "purchase_events": self.purchase_events,
            "order_count": self.order_count,
            "product_count": self.product_count,
            "skipped_events": len(self.report.skips),
        }


@dataclass
class PerformanceScoringResult:
    analyzed: int = 0
    blacklisted: int = 0
    boosted: int = 0
    report: BatchReport = field(default_factory=BatchReport)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analyzed": self.analyzed,
            "blacklisted": self.blacklisted,
            "boosted": self.boosted,
            **{f"report_{k}": v for k, v in self.report.to_dict().items()},
        }


@dataclass
class ProfileUpdateResult:
    created: int = 0
    updated: int = 0
    sessions: int = 0
    report: BatchReport = field(default_factory=BatchReport)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "created": self.created,
            "updated": self.updated,
            "sessions": self.sessions,
            **{f"report_{k}": v for k, v in self.report.to_dict().items()},
        }


@dataclass
class AttributionOutcome:
    attributed: List[str] = field(default_factory=list)
    missed: bool = False
    recommendation_event_ids: List[str] = field(default_factory=list)
    report: BatchReport = field(default_factory=BatchReport)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attributed": list(self.attributed),
            "missed": self.missed,
            "recommendation_event_ids": list(self.recommendation_event_ids),
            **{f"report_{k}": v for k, v in self.report.to_dict().items()},
        }


@dataclass
class ShopJobResult:
    """Outcome of one job run for one shop"""

    shop_id: str
    job_type: str
    success: bool
    status: str
    message: Optional[str] = None
    stats: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shop_id": self.shop_id,
            "job_type": self.job_type,
            "success": self.success,
            "status": self.status,
            "message": self.message,
            "stats": self.stats,
        }


@dataclass
class JobBatchSummary:
    """Per-shop results of a run over every active shop"""

    job_type: str
    results: List[ShopJobResult] = field(default_factory=list)

    @property
    def total_shops(self) -> int:
        return len(self.results)

    @property
    def successful_shops(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed_shops(self) -> int:
        return self.total_shops - self.successful_shops

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_type": self.job_type,
            "total_shops": self.total_shops,
            "successful_shops": self.successful_shops,
            "failed_shops": self.failed_shops,
            "results": [r.to_dict() for r in self.results],
        }
