"""
Typed rows for the progress analytics engine.

Rows arrive from the persistent store as plain dictionaries. They are
converted once into the dataclasses below so every downstream computation
works with parsed, timezone-aware timestamps and an explicit insertion
sequence for deterministic tie-breaks.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

import pandas as pd

import config


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a store timestamp into an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings (with or without offset / 'Z') and
    pandas Timestamps. Naive values are treated as UTC.

    Raises:
        ValueError: When the value is missing or not a timestamp.
    """
    if value is None or pd.isna(value):
        raise ValueError("Missing timestamp")
    if isinstance(value, datetime):
        parsed = value
    else:
        stamp = pd.Timestamp(value)
        if pd.isna(stamp):
            raise ValueError(f"Invalid timestamp {value!r}")
        parsed = stamp.to_pydatetime()
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


#------------------------------------------------------------------------------
# STORE ROWS
#------------------------------------------------------------------------------
@dataclass(frozen=True)
class Problem:
    """A boulder problem the climber is working on."""
    id: str
    grade: Optional[str]
    status: str
    created_at: datetime
    gym_id: Optional[str] = None
    grade_id: Optional[str] = None
    seq: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any], seq: int = 0) -> 'Problem':
        # status is a cached display hint; analytics never read it
        return cls(
            id=str(row['id']),
            grade=_optional_str(row.get('grade')),
            status=row.get('status') or 'project',
            created_at=parse_timestamp(row['created_at']),
            gym_id=_optional_str(row.get('gym_id')),
            grade_id=_optional_str(row.get('grade_id')),
            seq=seq,
        )


@dataclass(frozen=True)
class Attempt:
    """One physical try on a problem."""
    problem_id: str
    session_id: Optional[str]
    outcome: str
    created_at: datetime
    seq: int = 0

    @property
    def is_send(self) -> bool:
        return self.outcome == config.OUTCOME_SENT

    @classmethod
    def from_row(cls, row: Dict[str, Any], seq: int = 0) -> 'Attempt':
        outcome = str(row['outcome'])
        if outcome not in config.OUTCOMES:
            raise ValueError(f"Unknown attempt outcome '{outcome}'")
        return cls(
            problem_id=str(row['problem_id']),
            session_id=_optional_str(row.get('session_id')),
            outcome=outcome,
            created_at=parse_timestamp(row['created_at']),
            seq=seq,
        )


@dataclass(frozen=True)
class Session:
    id: str
    date: date
    energy: str = config.DEFAULT_ENERGY

    @classmethod
    def from_row(cls, row: Dict[str, Any], seq: int = 0) -> 'Session':
        energy = row.get('energy')
        if energy not in config.ENERGY_LEVELS:
            energy = config.DEFAULT_ENERGY
        return cls(id=str(row['id']), date=parse_date(row['date']), energy=energy)


@dataclass(frozen=True)
class Gym:
    id: str
    name: str
    is_home: bool = False
    grading_mode: str = 'specific'

    @classmethod
    def from_row(cls, row: Dict[str, Any], seq: int = 0) -> 'Gym':
        return cls(
            id=str(row['id']),
            name=str(row.get('name') or ''),
            is_home=bool(row.get('is_home')),
            grading_mode=row.get('grading_mode') or 'specific',
        )


@dataclass(frozen=True)
class GymGrade:
    """A gym-specific grade (name + hold color). Lower sort_order = easier."""
    id: str
    gym_id: str
    name: str
    color: Optional[str]
    sort_order: Optional[int]
    created_at: Optional[datetime] = None
    seq: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any], seq: int = 0) -> 'GymGrade':
        sort_order = row.get('sort_order')
        created_at = row.get('created_at')
        return cls(
            id=str(row['id']),
            gym_id=str(row['gym_id']),
            name=str(row.get('name') or ''),
            color=_optional_str(row.get('color')),
            sort_order=int(sort_order) if sort_order is not None else None,
            created_at=parse_timestamp(created_at) if created_at is not None else None,
            seq=seq,
        )


#------------------------------------------------------------------------------
# DERIVED RECORDS
#------------------------------------------------------------------------------
@dataclass(frozen=True)
class SendRecord:
    """First successful send of a problem."""
    problem_id: str
    first_sent_at: datetime
    attempts_to_send: int
    # sequence of the sending attempt, used as a stable tie-break
    seq: int = 0


@dataclass(frozen=True)
class GradeInfo:
    rank: Optional[int]
    label: str
    color: Optional[str] = None
    source: Optional[str] = None  # 'home', 'text' or None


@dataclass(frozen=True)
class RankedSend:
    send: SendRecord
    grade: GradeInfo

    @property
    def rank(self) -> int:
        # rank_sends only builds RankedSend for grades with a rank
        return self.grade.rank


@dataclass(frozen=True)
class Conversion:
    attempts: int
    sends: int
    rate: float

    def to_dict(self) -> Dict[str, Any]:
        return {'attempts': self.attempts, 'sends': self.sends, 'rate': self.rate}
