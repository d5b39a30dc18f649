"""
Concurrent fan-out of many run requests.
"""

import asyncio
import logging
from typing import Any, Iterable, List, Optional

from ..models.requests import ProcessExitInfo, RunRequest
from .process_runner import ProcessRunner

logger = logging.getLogger(__name__)


def normalize_requests(requests: Iterable[Any]) -> List[RunRequest]:
    """
    Turn a heterogeneous request list into RunRequests.

    Elements may be bare target strings, ``(target, params)`` pairs,
    ``{"script": ..., "params": ...}`` mappings or RunRequests.
    """
    return [RunRequest.coerce(item) for item in requests]


class BatchRunner:
    """
    Runs many requests concurrently and joins them all-or-nothing.

    Every request is started at once unless ``max_concurrency`` bounds the
    number running simultaneously. The first failure propagates to the
    caller; siblings are not cancelled and their results are dropped.
    """

    def __init__(self, runner: Optional[ProcessRunner] = None, max_concurrency: Optional[int] = None):
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1 or None, got {max_concurrency}")
        self.runner = runner or ProcessRunner()
        self.max_concurrency = max_concurrency

    async def run_async(self, requests: Iterable[Any]) -> List[ProcessExitInfo]:
        """
        Run all requests and return their results in input order.

        Raises:
            Exception: The first failure of any individual run
        """
        normalized = normalize_requests(requests)
        if not normalized:
            return []

        logger.info(
            f"Running {len(normalized)} requests concurrently"
            + (f" (max {self.max_concurrency} at a time)" if self.max_concurrency else "")
        )

        if self.max_concurrency is None:
            runs = [self.runner.run_request(request) for request in normalized]
        else:
            semaphore = asyncio.Semaphore(self.max_concurrency)
            runs = [self._bounded(semaphore, request) for request in normalized]

        # gather keeps positional order and leaves siblings running on failure
        return list(await asyncio.gather(*runs))

    async def _bounded(self, semaphore: asyncio.Semaphore, request: RunRequest) -> ProcessExitInfo:
        async with semaphore:
            return await self.runner.run_request(request)
