"""
Snapshot loading and progress payload assembly.

The engine never talks to the persistent store directly. A
``ProgressRepository`` hands over plain row dictionaries, ``load_snapshot``
turns them into one validated in-memory ``Snapshot`` and
``build_progress_payload`` runs every analysis over it, producing the
read-only ``ProgressPayload`` consumed by the dashboard and the exporter.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Callable, Dict, List, Optional

import config
from grading_system import GradeResolver
from heatmap import HeatmapDay, build_heatmap
from milestones import (GradeStep, MilestoneEntry, build_milestones, rank_sends,
                        recent_first_sends, recent_milestones)
from models import Attempt, Conversion, Gym, GymGrade, Problem, Session
from recommendations import (Recommendation, attempts_per_send_hint, classify_zone,
                             recommend, zone_meta)
from session_summary import SessionSummary, summarize_sessions
from stats import (WeeklyConversion, WorkedProblems, average_attempts_per_send,
                   efficiency_histogram, extract_sends, rolling_conversion, utc_now,
                   weekly_conversion, worked_problems)

# Set up logging
logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """Raised when the loaded rows violate the snapshot invariants."""


#------------------------------------------------------------------------------
# READ REPOSITORY
#------------------------------------------------------------------------------
class ProgressRepository(ABC):
    """Read access to the tables the progress engine needs."""

    @abstractmethod
    def list_problems(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def list_attempts(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def list_gym_grades(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def list_gyms(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def list_sessions(self) -> List[Dict[str, Any]]:
        ...


class InMemoryRepository(ProgressRepository):
    """Repository over fixed row lists."""

    def __init__(self, problems=None, attempts=None, gym_grades=None, gyms=None, sessions=None):
        self.problems = list(problems or [])
        self.attempts = list(attempts or [])
        self.gym_grades = list(gym_grades or [])
        self.gyms = list(gyms or [])
        self.sessions = list(sessions or [])

    def list_problems(self) -> List[Dict[str, Any]]:
        return list(self.problems)

    def list_attempts(self) -> List[Dict[str, Any]]:
        return list(self.attempts)

    def list_gym_grades(self) -> List[Dict[str, Any]]:
        return list(self.gym_grades)

    def list_gyms(self) -> List[Dict[str, Any]]:
        return list(self.gyms)

    def list_sessions(self) -> List[Dict[str, Any]]:
        return list(self.sessions)


#------------------------------------------------------------------------------
# SNAPSHOT
#------------------------------------------------------------------------------
@dataclass
class Snapshot:
    """Fully loaded, validated tables for one view."""
    problems: List[Problem]
    attempts: List[Attempt]
    gym_grades: List[GymGrade]
    gyms: List[Gym] = field(default_factory=list)
    sessions: List[Session] = field(default_factory=list)

    @property
    def home_gym(self) -> Optional[Gym]:
        return next((g for g in self.gyms if g.is_home), None)

    @property
    def problems_by_id(self) -> Dict[str, Problem]:
        return {p.id: p for p in self.problems}


def _convert_rows(name: str, rows: Optional[List[Dict[str, Any]]], factory: Callable) -> list:
    if rows is None:
        raise SnapshotError(f"Collection '{name}' was not loaded")
    converted = []
    for seq, row in enumerate(rows):
        try:
            converted.append(factory(row, seq=seq))
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"Invalid {name} row at position {seq}: {e}") from e
    return converted


def validate_snapshot(snapshot: Snapshot) -> None:
    """
    Enforce snapshot invariants.

    Raises:
        SnapshotError: When more than one gym is flagged as home gym.
    """
    home_gyms = [g.id for g in snapshot.gyms if g.is_home]
    if len(home_gyms) > 1:
        raise SnapshotError(f"At most one home gym allowed, found {len(home_gyms)}: {home_gyms}")


def load_snapshot(repository: ProgressRepository) -> Snapshot:
    """
    Fetch every collection once and convert it into a validated Snapshot.

    Fetch errors raised by the repository propagate unchanged.
    """
    snapshot = Snapshot(
        problems=_convert_rows('problems', repository.list_problems(), Problem.from_row),
        attempts=_convert_rows('attempts', repository.list_attempts(), Attempt.from_row),
        gym_grades=_convert_rows('gym_grades', repository.list_gym_grades(), GymGrade.from_row),
        gyms=_convert_rows('gyms', repository.list_gyms(), Gym.from_row),
        sessions=_convert_rows('sessions', repository.list_sessions(), Session.from_row),
    )
    validate_snapshot(snapshot)
    logger.info("Loaded snapshot: %d problems, %d attempts, %d sessions, %d gym grades",
                len(snapshot.problems), len(snapshot.attempts),
                len(snapshot.sessions), len(snapshot.gym_grades))
    return snapshot


#------------------------------------------------------------------------------
# PAYLOAD
#------------------------------------------------------------------------------
@dataclass
class ProgressPayload:
    """Everything the progress view shows, derived from one snapshot."""
    generated_at: datetime
    header: Dict[str, Any]
    conversion: Conversion
    zone: str
    recommendations: List[Recommendation]
    weekly: List[WeeklyConversion]
    efficiency: Dict[str, int]
    avg_attempts_per_send: Optional[float]
    worked: WorkedProblems
    grade_steps: List[GradeStep]
    timeline: List[MilestoneEntry]
    hardest: Optional[Dict[str, Any]]
    heatmap: List[HeatmapDay]
    sessions: List[SessionSummary]

    @property
    def recent_milestones(self) -> List[MilestoneEntry]:
        return recent_milestones(self.timeline)

    @property
    def recent_sends(self) -> List[MilestoneEntry]:
        return recent_first_sends(self.timeline)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation (dates as ISO strings)."""
        return {
            'generated_at': self.generated_at.isoformat(),
            'header': dict(self.header),
            'conversion': {
                **self.conversion.to_dict(),
                'zone': self.zone,
                'zone_meta': zone_meta(self.zone).to_dict(),
                'attempts_per_send': attempts_per_send_hint(self.conversion.rate),
            },
            'recommendations': [r.to_dict() for r in self.recommendations],
            'weekly': [w.to_dict() for w in self.weekly],
            'efficiency': dict(self.efficiency),
            'avg_attempts_per_send': self.avg_attempts_per_send,
            'worked': self.worked.to_dict(),
            'grade_steps': [s.to_dict() for s in self.grade_steps],
            'timeline': [t.to_dict() for t in self.timeline],
            'recent_milestones': [t.to_dict() for t in self.recent_milestones],
            'recent_sends': [t.to_dict() for t in self.recent_sends],
            'hardest': dict(self.hardest) if self.hardest is not None else None,
            'heatmap': [d.to_dict() for d in self.heatmap],
            'sessions': [s.to_dict() for s in self.sessions],
        }


def build_progress_payload(snapshot: Snapshot, now: Optional[datetime] = None,
                           tz: Optional[tzinfo] = None,
                           rolling_days: int = config.ROLLING_WINDOW_DAYS,
                           weeks: int = config.WEEKLY_WINDOW_WEEKS,
                           heatmap_days: int = config.HEATMAP_WINDOW_DAYS) -> ProgressPayload:
    """
    Run every analysis over a snapshot.

    Args:
        snapshot: Fully loaded tables.
        now: Reference time for all windows. Defaults to the current UTC time.
        tz: Timezone for calendar-day assignment. Defaults to UTC.
        rolling_days: Length of the rolling conversion window.
        weeks: Number of calendar weeks in the weekly series.
        heatmap_days: Length of the heatmap window.

    Returns:
        ProgressPayload built from the snapshot alone.
    """
    now = now or utc_now()
    problems_by_id = snapshot.problems_by_id
    home_gym = snapshot.home_gym
    resolver = GradeResolver(home_gym, snapshot.gym_grades)

    # Sends are derived from the attempt log, never from problem.status.
    # Attempts pointing at unknown problems do not count as sends.
    all_sends = extract_sends(snapshot.attempts)
    sends = [s for s in all_sends if s.problem_id in problems_by_id]
    if len(sends) != len(all_sends):
        logger.debug("Ignored %d sends for problems missing from the snapshot",
                     len(all_sends) - len(sends))

    conversion = rolling_conversion(snapshot.attempts, days=rolling_days, now=now)
    zone = classify_zone(conversion.rate)
    worked = worked_problems(snapshot.problems, snapshot.attempts)

    milestones = build_milestones(rank_sends(sends, problems_by_id, resolver), tz=tz)
    hardest = None
    if milestones.hardest is not None:
        hardest = {
            'label': milestones.hardest.grade.label,
            'color': milestones.hardest.grade.color,
            'rank': milestones.hardest.rank,
            'problem_id': milestones.hardest.send.problem_id,
        }

    header = {
        'total_attempts': len(snapshot.attempts),
        'total_problems': len(snapshot.problems),
        'total_sends': len(sends),
        'home_gym_name': home_gym.name if home_gym is not None else None,
    }

    return ProgressPayload(
        generated_at=now,
        header=header,
        conversion=conversion,
        zone=zone,
        recommendations=recommend(conversion, worked),
        weekly=weekly_conversion(snapshot.attempts, weeks=weeks, now=now, tz=tz),
        efficiency=efficiency_histogram(sends),
        avg_attempts_per_send=average_attempts_per_send(sends),
        worked=worked,
        grade_steps=milestones.steps,
        timeline=milestones.timeline,
        hardest=hardest,
        heatmap=build_heatmap(snapshot.attempts, days=heatmap_days, now=now, tz=tz),
        sessions=summarize_sessions(snapshot.sessions, snapshot.attempts, problems_by_id, resolver),
    )


def process_data(repository: ProgressRepository, now: Optional[datetime] = None,
                 tz: Optional[tzinfo] = None) -> ProgressPayload:
    """Load a snapshot from the repository and build its payload."""
    return build_progress_payload(load_snapshot(repository), now=now, tz=tz)
