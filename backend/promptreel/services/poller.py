"""Completion poller — drives status checks until a terminal state or deadline.

Fixed-interval polling: provider jobs finish within minutes and a status
check is cheap next to the generation itself. The deadline and interval are
per-call so each provider can use its own profile.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

from promptreel.errors import GenerationTimeoutError, TransientPollError
from promptreel.services.models import JobState, JobStatus

logger = logging.getLogger(__name__)

StatusFn = Callable[[str], Awaitable[JobStatus]]


async def poll_until_terminal(
    job_id: str,
    status_fn: StatusFn,
    *,
    max_wait: float,
    poll_interval: float,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "video",
) -> JobStatus:
    """Poll ``status_fn(job_id)`` until COMPLETED or FAILED.

    Transient errors and unknown status codes keep the loop going; they are
    bounded only by the deadline. Raises GenerationTimeoutError when the
    deadline passes without a terminal status.
    """
    start = clock()
    deadline = start + max_wait
    checks = 0

    while clock() < deadline:
        checks += 1
        try:
            status = await status_fn(job_id)
        except TransientPollError as e:
            logger.error("Error checking %s job %s status: %s", label, job_id, e)
            await sleep(poll_interval)
            continue

        if status.is_terminal:
            if status.state == JobState.FAILED:
                logger.error("%s job %s failed: %s", label, job_id, status.reason)
            else:
                logger.info("%s job %s completed after %d check(s)", label, job_id, checks)
            return status

        if status.state == JobState.UNKNOWN:
            logger.warning("%s job %s reported unknown status: %r", label, job_id, status.raw)
        else:
            logger.debug("%s job %s still generating (check %d)", label, job_id, checks)

        await sleep(poll_interval)

    logger.error("%s generation timeout for job %s after %d check(s)", label, job_id, checks)
    raise GenerationTimeoutError(job_id, waited=max_wait)
