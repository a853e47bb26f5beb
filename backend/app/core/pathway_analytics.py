"""Pathway Analytics — pure computation of enrollment, completion and drop-off figures.

Invariants:
    - completion_rate = round_half_up(completed / total * 100), 0 when total == 0
    - drop_off_rate per step = (total - completions) / total * 100, unrounded, 0 when total == 0
    - steps reported in ascending order
    - recent_progress holds at most RECENT_LIMIT entries, member name falls back to "Unknown"

Design Decisions:
    - Input is plain dataclasses, not ORM rows: function is testable without a DB
    - Round half up (not banker's rounding): matches what the dashboard has always shown
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

RECENT_LIMIT = 10
UNKNOWN_MEMBER = "Unknown"


@dataclass
class StepInput:
    id: Any
    name: str
    order: int


@dataclass
class ProgressInput:
    id: Any
    member_name: str | None
    current_step: int
    started_at: datetime | None
    completed_at: datetime | None
    completed_step_ids: set = field(default_factory=set)


def round_half_up(value: float) -> int:
    return int(value + 0.5)


def _percent(part: int, total: int) -> int:
    if total == 0:
        return 0
    return round_half_up(part / total * 100)


def compute_pathway_analytics(
    steps: list[StepInput], progress: list[ProgressInput],
) -> dict:
    """Aggregate enrollment rows into the analytics payload."""
    total = len(progress)
    completed = sum(1 for p in progress if p.completed_at is not None)

    step_rows = []
    for step in sorted(steps, key=lambda s: s.order):
        completions = sum(1 for p in progress if step.id in p.completed_step_ids)
        step_rows.append({
            "id": step.id,
            "name": step.name,
            "order": step.order,
            "completions": completions,
            "drop_off_rate": (
                (total - completions) / total * 100 if total else 0.0
            ),
        })

    recent = [
        {
            "id": p.id,
            "member_name": p.member_name or UNKNOWN_MEMBER,
            "current_step": p.current_step,
            "started_at": p.started_at,
            "completed_at": p.completed_at,
        }
        for p in progress[:RECENT_LIMIT]
    ]

    return {
        "total_enrolled": total,
        "completed_count": completed,
        "in_progress": total - completed,
        "completion_rate": _percent(completed, total),
        "step_analytics": step_rows,
        "recent_progress": recent,
    }
