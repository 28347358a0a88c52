from __future__ import annotations

from collections.abc import Collection, Sequence
from enum import Enum


class ExecutionPolicy(Enum):
    # Which declared steps run once some of them have been configured explicitly.
    ALL = "all"
    CONFIGURED_ONLY = "configured_only"
    CONFIGURED_AND_PRECEDING = "configured_and_preceding"


def select_runnable(
    step_ids: Sequence[str],
    policy: ExecutionPolicy,
    configured: Collection[str],
) -> list[str]:
    # step_ids must already be in declared order.
    if policy is ExecutionPolicy.ALL:
        return list(step_ids)
    if policy is ExecutionPolicy.CONFIGURED_ONLY:
        return [step_id for step_id in step_ids if step_id in configured]
    if policy is ExecutionPolicy.CONFIGURED_AND_PRECEDING:
        last = -1
        for index, step_id in enumerate(step_ids):
            if step_id in configured:
                last = index
        # No configured id in the declaration yields an empty run.
        return list(step_ids[: last + 1])
    raise ValueError(f"Unsupported execution policy: {policy!r}")
