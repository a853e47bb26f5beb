"""Pathway Analytics — pure aggregation over plain step/progress inputs."""

from datetime import datetime, timezone

from app.core.pathway_analytics import (
    RECENT_LIMIT, ProgressInput, StepInput, compute_pathway_analytics, round_half_up,
)

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _progress(i, done=(), completed=False, name="Member"):
    return ProgressInput(
        id=i,
        member_name=name,
        current_step=len(done) + 1,
        started_at=NOW,
        completed_at=NOW if completed else None,
        completed_step_ids=set(done),
    )


def test_empty_pathway():
    result = compute_pathway_analytics([StepInput("s1", "One", 1)], [])
    assert result["total_enrolled"] == 0
    assert result["completion_rate"] == 0
    assert result["step_analytics"][0]["drop_off_rate"] == 0.0
    assert result["recent_progress"] == []


def test_rates():
    steps = [StepInput("s2", "Two", 2), StepInput("s1", "One", 1)]
    progress = [
        _progress(1, done=["s1", "s2"], completed=True),
        _progress(2, done=["s1"]),
        _progress(3),
    ]

    result = compute_pathway_analytics(steps, progress)

    assert result["total_enrolled"] == 3
    assert result["completed_count"] == 1
    assert result["in_progress"] == 2
    assert result["completion_rate"] == 33
    assert [s["id"] for s in result["step_analytics"]] == ["s1", "s2"]
    assert result["step_analytics"][0]["completions"] == 2
    assert abs(result["step_analytics"][0]["drop_off_rate"] - 100 / 3) < 1e-9
    assert abs(result["step_analytics"][1]["drop_off_rate"] - 200 / 3) < 1e-9


def test_completion_rate_rounds_half_up():
    steps = [StepInput("s1", "One", 1)]
    progress = [_progress(i, completed=(i == 0)) for i in range(8)]
    # 1/8 = 12.5% -> 13
    assert compute_pathway_analytics(steps, progress)["completion_rate"] == 13


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.49) == 2


def test_recent_progress_limited_and_named():
    progress = [_progress(i, name=None if i == 0 else f"M{i}") for i in range(12)]

    recent = compute_pathway_analytics([], progress)["recent_progress"]

    assert len(recent) == RECENT_LIMIT
    assert recent[0]["member_name"] == "Unknown"
    assert [r["id"] for r in recent] == list(range(RECENT_LIMIT))
