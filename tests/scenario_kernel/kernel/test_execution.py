from __future__ import annotations

from scenario_kernel.kernel import ExecutionPolicy, select_runnable

DECLARED = ["a", "b", "c", "d"]


def test_all_runs_every_declared_step() -> None:
    # Configuration is irrelevant under ALL.
    assert select_runnable(DECLARED, ExecutionPolicy.ALL, set()) == DECLARED
    assert select_runnable(DECLARED, ExecutionPolicy.ALL, {"b"}) == DECLARED


def test_configured_only_keeps_declared_order() -> None:
    # Only configured ids run, in declared order regardless of configuration order.
    assert select_runnable(DECLARED, ExecutionPolicy.CONFIGURED_ONLY, ["d", "b"]) == ["b", "d"]


def test_configured_only_ignores_unknown_ids() -> None:
    # Ids outside the declaration never run.
    assert select_runnable(DECLARED, ExecutionPolicy.CONFIGURED_ONLY, {"zzz"}) == []


def test_configured_and_preceding_runs_prefix_up_to_last_configured() -> None:
    # Everything up to and including the last configured id runs.
    assert select_runnable(DECLARED, ExecutionPolicy.CONFIGURED_AND_PRECEDING, {"b"}) == ["a", "b"]
    assert select_runnable(DECLARED, ExecutionPolicy.CONFIGURED_AND_PRECEDING, {"a", "c"}) == ["a", "b", "c"]


def test_configured_and_preceding_without_match_is_empty() -> None:
    # No configured id in the declaration yields an empty run.
    assert select_runnable(DECLARED, ExecutionPolicy.CONFIGURED_AND_PRECEDING, set()) == []
    assert select_runnable(DECLARED, ExecutionPolicy.CONFIGURED_AND_PRECEDING, {"unknown"}) == []
