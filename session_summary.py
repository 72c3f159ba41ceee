"""
Per-session summaries and the session classifier.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

import config
from grading_system import GradeResolver
from models import Attempt, Problem, Session
from stats import conversion_rate, extract_sends

logger = logging.getLogger(__name__)

FLOW_DAY = 'Flow day'
PROGRESS_DAY = 'Progress day'
VOLUME_DAY = 'Volume day'
WARM_UP = 'Warm-up'
SOLID_SESSION = 'Solid session'

SESSION_COPY = {
    FLOW_DAY: 'Strong day! You topped problems after very few attempts each.',
    PROGRESS_DAY: 'Hard-earned sends: the projecting paid off.',
    VOLUME_DAY: 'Lots of mileage. Volume days build the base for later sends.',
    WARM_UP: 'Log attempts to see your session summary here.',
    SOLID_SESSION: 'Solid session. Every attempt builds technique and body tension.',
}


def classify_session(attempts: int, sends: int) -> str:
    """
    Label a session from its attempt and send counts.

    Rules are checked in a fixed order and the first match wins:
    flow, progress, volume, warm-up, then the solid-session default.
    """
    if sends >= config.FLOW_MIN_SENDS and attempts > 0 and attempts / sends <= config.FLOW_MAX_ATTEMPTS_PER_SEND:
        return FLOW_DAY
    if sends >= config.PROGRESS_MIN_SENDS and attempts >= config.PROGRESS_MIN_ATTEMPTS:
        return PROGRESS_DAY
    if attempts >= config.VOLUME_MIN_ATTEMPTS:
        return VOLUME_DAY
    if attempts == 0:
        return WARM_UP
    return SOLID_SESSION


@dataclass(frozen=True)
class SessionSummary:
    session_id: str
    date: date
    energy: str
    attempts: int
    sends: int
    projects: int
    conversion: float
    hardest_label: Optional[str]
    hardest_color: Optional[str]
    label: str

    @property
    def copy(self) -> str:
        return SESSION_COPY[self.label]

    def to_dict(self) -> Dict[str, object]:
        return {
            'session_id': self.session_id,
            'date': self.date.isoformat(),
            'energy': self.energy,
            'attempts': self.attempts,
            'sends': self.sends,
            'projects': self.projects,
            'conversion': self.conversion,
            'hardest_label': self.hardest_label,
            'hardest_color': self.hardest_color,
            'label': self.label,
            'copy': self.copy,
        }


def summarize_session(session: Session, attempts: List[Attempt],
                      problems: Dict[str, Problem], resolver: GradeResolver) -> SessionSummary:
    """
    Summarize one session.

    Args:
        session: The session row.
        attempts: Attempts belonging to this session.
        problems: Problems by id, used to grade the session's sends.
        resolver: Grade resolver for the hardest-send label.
    """
    sends = extract_sends(attempts, session_id=session.id)

    hardest_label: Optional[str] = None
    hardest_color: Optional[str] = None
    hardest_rank = -1
    for record in sends:
        problem = problems.get(record.problem_id)
        if problem is None:
            continue
        grade = resolver.resolve(problem)
        if grade.rank is not None and grade.rank > hardest_rank:
            hardest_rank = grade.rank
            hardest_label, hardest_color = grade.label, grade.color
        elif hardest_rank == -1 and hardest_label is None and problem.grade:
            # Nothing ranked yet: keep the first free-text label seen
            hardest_label = problem.grade

    return SessionSummary(
        session_id=session.id,
        date=session.date,
        energy=session.energy,
        attempts=len(attempts),
        sends=len(sends),
        projects=len({a.problem_id for a in attempts}),
        conversion=conversion_rate(len(attempts), len(sends)),
        hardest_label=hardest_label,
        hardest_color=hardest_color,
        label=classify_session(len(attempts), len(sends)),
    )


def summarize_sessions(sessions: Iterable[Session], attempts: Iterable[Attempt],
                       problems: Dict[str, Problem], resolver: GradeResolver) -> List[SessionSummary]:
    """Summaries for every session, newest date first."""
    by_session: Dict[str, List[Attempt]] = defaultdict(list)
    for attempt in attempts:
        if attempt.session_id is not None:
            by_session[attempt.session_id].append(attempt)

    summaries = [
        summarize_session(session, by_session.get(session.id, []), problems, resolver)
        for session in sessions
    ]
    summaries.sort(key=lambda s: s.date, reverse=True)
    return summaries
