# fanout.py
"""
Multi-subnet query: run the same dig query once per registry entry, each with
its own +subnet (EDNS Client Subnet), so answers can be compared across
regions and ISPs.

All subprocesses run concurrently on the event loop. Every entry ends up in
exactly one of successful_results / failed_results; one slow or broken
vantage point never aborts the others. Nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Union

from digtool.models import DigOptions, DigResult
from digtool.service import DigExecutionError, DigService

from .registry import SubnetInfo

logger = logging.getLogger(__name__)

FAILED_QUERY_MESSAGE = "Query failed"


class AggregationError(RuntimeError):
    """Fan-out bookkeeping went wrong (counts do not add up)."""


# -----------------------------
# Data models
# -----------------------------

@dataclass
class SubnetQuerySuccess:
    subnet_info: SubnetInfo
    result: DigResult
    success: ClassVar[bool] = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subnetInfo": self.subnet_info.to_dict(),
            "result": self.result.to_dict(),
            "success": True,
        }


@dataclass
class SubnetQueryFailure:
    subnet_info: SubnetInfo
    error: str
    success: ClassVar[bool] = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subnetInfo": self.subnet_info.to_dict(),
            "error": self.error,
            "success": False,
        }


SubnetQueryOutcome = Union[SubnetQuerySuccess, SubnetQueryFailure]


@dataclass
class MultiSubnetQueryResult:
    successful_results: List[SubnetQuerySuccess] = field(default_factory=list)
    failed_results: List[SubnetQueryFailure] = field(default_factory=list)
    total_queries: int = 0

    @property
    def success_count(self) -> int:
        return len(self.successful_results)

    @property
    def failure_count(self) -> int:
        return len(self.failed_results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "successfulResults": [r.to_dict() for r in self.successful_results],
            "failedResults": [r.to_dict() for r in self.failed_results],
            "totalQueries": self.total_queries,
            "successCount": self.success_count,
            "failureCount": self.failure_count,
        }


# -----------------------------
# Orchestrator
# -----------------------------

class SubnetFanout:
    def __init__(
        self,
        service: DigService,
        subnets: Sequence[SubnetInfo],
        max_concurrency: Optional[int] = None,
    ) -> None:
        self.service = service
        self.subnets = tuple(subnets)
        # None/0 means one slot per registry entry, i.e. everything at once
        self.max_concurrency = max_concurrency or max(1, len(self.subnets))

    async def _run_one(self, sem: asyncio.Semaphore, info: SubnetInfo, domain: str, record_type: str) -> SubnetQueryOutcome:
        options = DigOptions(domain=domain, record_type=record_type, subnet=info.subnet)
        async with sem:
            try:
                result = await self.service.execute(options)
            except DigExecutionError as e:
                logger.warning(
                    "Subnet query failed: subnet=%s (%s/%s) domain=%s type=%s error=%s",
                    info.subnet, info.province, info.isp, domain, record_type, e,
                )
                return SubnetQueryFailure(subnet_info=info, error=FAILED_QUERY_MESSAGE)
        return SubnetQuerySuccess(subnet_info=info, result=result)

    async def query_all(self, domain: str, record_type: str = "A") -> MultiSubnetQueryResult:
        sem = asyncio.Semaphore(self.max_concurrency)
        outcomes = await asyncio.gather(
            *(self._run_one(sem, info, domain, record_type) for info in self.subnets),
            return_exceptions=True,
        )

        out = MultiSubnetQueryResult(total_queries=len(self.subnets))
        for info, outcome in zip(self.subnets, outcomes):
            if isinstance(outcome, SubnetQuerySuccess):
                out.successful_results.append(outcome)
            elif isinstance(outcome, SubnetQueryFailure):
                out.failed_results.append(outcome)
            elif isinstance(outcome, Exception):
                logger.exception(
                    "Subnet query raised unexpectedly: subnet=%s domain=%s type=%s",
                    info.subnet, domain, record_type, exc_info=outcome,
                )
                out.failed_results.append(SubnetQueryFailure(subnet_info=info, error=FAILED_QUERY_MESSAGE))
            else:
                # CancelledError and other BaseExceptions are not ours to swallow
                raise outcome

        if out.success_count + out.failure_count != out.total_queries:
            raise AggregationError(
                f"fan-out accounted for {out.success_count + out.failure_count} of {out.total_queries} subnets"
            )

        logger.info(
            "fan-out %s %s: %d/%d succeeded",
            domain, record_type, out.success_count, out.total_queries,
        )
        return out
