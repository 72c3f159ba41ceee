"""
Milestones and the hardest-grade step series.

Ranked first sends are walked in chronological order. Every send adds one
point to the step series (the running maximum rank) and one entry to the
milestone timeline, flagged when it beats every earlier send.
"""

import logging
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Dict, Iterable, List, Optional

import config
from grading_system import GradeResolver
from models import Problem, RankedSend, SendRecord
from stats import local_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GradeStep:
    day: date
    rank: int
    max_rank_so_far: int

    def to_dict(self) -> Dict[str, object]:
        return {'day': self.day.isoformat(), 'rank': self.rank, 'max_rank_so_far': self.max_rank_so_far}


@dataclass(frozen=True)
class MilestoneEntry:
    day: date
    problem_id: str
    label: str
    color: Optional[str]
    attempts_to_send: int
    is_new_hardest: bool

    def to_dict(self) -> Dict[str, object]:
        return {
            'day': self.day.isoformat(),
            'problem_id': self.problem_id,
            'label': self.label,
            'color': self.color,
            'attempts_to_send': self.attempts_to_send,
            'is_new_hardest': self.is_new_hardest,
        }


@dataclass(frozen=True)
class MilestoneResult:
    steps: List[GradeStep]
    timeline: List[MilestoneEntry]
    hardest: Optional[RankedSend]


def rank_sends(sends: Iterable[SendRecord], problems: Dict[str, Problem],
               resolver: GradeResolver) -> List[RankedSend]:
    """
    Attach grades to send records and keep only the rankable ones.

    Sends whose problem is missing from the snapshot are skipped.

    Returns:
        Ranked sends sorted by first-send time, then by sending-attempt sequence.
    """
    ranked: List[RankedSend] = []
    for record in sends:
        problem = problems.get(record.problem_id)
        if problem is None:
            logger.debug("Skipping send for unknown problem %s", record.problem_id)
            continue
        grade = resolver.resolve(problem)
        if grade.rank is None:
            continue
        ranked.append(RankedSend(send=record, grade=grade))
    ranked.sort(key=lambda r: (r.send.first_sent_at, r.send.seq))
    return ranked


def build_milestones(ranked_sends: List[RankedSend], tz: Optional[tzinfo] = None) -> MilestoneResult:
    """
    Build the step series, milestone timeline and overall hardest send.

    Args:
        ranked_sends: Ranked sends in chronological order.
        tz: Timezone used for the calendar day of each entry.

    Returns:
        MilestoneResult. For an empty input all parts are empty and hardest is None.
    """
    steps: List[GradeStep] = []
    timeline: List[MilestoneEntry] = []
    hardest: Optional[RankedSend] = None
    max_rank = -1

    for ranked in ranked_sends:
        day = local_day(ranked.send.first_sent_at, tz)
        # Ties at the current hardest are not milestones
        is_new_hardest = ranked.rank > max_rank
        if is_new_hardest:
            max_rank = ranked.rank
            hardest = ranked

        steps.append(GradeStep(day=day, rank=ranked.rank, max_rank_so_far=max_rank))
        timeline.append(MilestoneEntry(
            day=day,
            problem_id=ranked.send.problem_id,
            label=ranked.grade.label,
            color=ranked.grade.color,
            attempts_to_send=ranked.send.attempts_to_send,
            is_new_hardest=is_new_hardest,
        ))

    return MilestoneResult(steps=steps, timeline=timeline, hardest=hardest)


def recent_milestones(timeline: List[MilestoneEntry],
                      limit: int = config.RECENT_MILESTONES_LIMIT) -> List[MilestoneEntry]:
    """Latest new-hardest entries, newest first."""
    new_hardest = [entry for entry in timeline if entry.is_new_hardest]
    return list(reversed(new_hardest[-limit:])) if limit > 0 else []


def recent_first_sends(timeline: List[MilestoneEntry],
                       limit: int = config.RECENT_SENDS_LIMIT) -> List[MilestoneEntry]:
    return list(reversed(timeline[-limit:])) if limit > 0 else []
