"""Concurrent fan-out of independent fetches with an all-or-nothing join."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def gather(calls: Sequence[Callable[[], T]], max_workers: int = 4) -> list[T]:
    """Run *calls* concurrently and return their results in submission order.

    The batch is a join, not a pipeline: nothing is combined until every
    call has finished. If any call raises, the remaining calls still run
    to completion (there is no cancellation), all results are discarded,
    and the first failure observed is re-raised.
    """
    if not calls:
        return []

    failure: BaseException | None = None
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(calls)))) as executor:
        futures = [executor.submit(call) for call in calls]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in futures:
            if future in done and future.exception() is not None:
                failure = future.exception()
                break
        if failure is not None:
            logger.warning(
                "Fan-out of %d calls failed (%d still running): %s",
                len(calls), len(pending), failure,
            )
    # leaving the executor waits for stragglers; their results are dropped

    if failure is not None:
        raise failure
    return [future.result() for future in futures]
