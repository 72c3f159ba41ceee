"""
Statistical analysis module for logged boulder attempts.

This module turns the raw attempt log into the basic training signals:
first sends per problem (with attempts-to-send), attempt-to-send
conversion over rolling and calendar-week windows, and the
flash / learn / project efficiency split.

The cached ``problem.status`` field is never consulted here. Whether a
problem has been sent is always derived from the attempt log.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

import config
from models import Attempt, Conversion, Problem, SendRecord

# Set up logging
logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_day(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar day of an aware datetime in the given timezone (UTC by default)."""
    return moment.astimezone(tz or timezone.utc).date()


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


#------------------------------------------------------------------------------
# SEND EXTRACTION
#------------------------------------------------------------------------------
def group_attempts_by_problem(attempts: Iterable[Attempt]) -> Dict[str, List[Attempt]]:
    """Group attempts by problem id, each group ordered by (timestamp, sequence)."""
    groups: Dict[str, List[Attempt]] = defaultdict(list)
    for attempt in attempts:
        groups[attempt.problem_id].append(attempt)
    for group in groups.values():
        group.sort(key=lambda a: (a.created_at, a.seq))
    return dict(groups)


def extract_sends(attempts: Iterable[Attempt], session_id: Optional[str] = None) -> List[SendRecord]:
    """
    Derive the first successful send of every problem.

    Args:
        attempts: Attempt log (any order).
        session_id: When given, only attempts from that session are considered,
                    so the result holds the problems first sent within it.

    Returns:
        One SendRecord per problem with at least one 'sent' attempt, ordered by
        first-send time. attempts_to_send counts every attempt up to and
        including the sending one.
    """
    if session_id is not None:
        attempts = [a for a in attempts if a.session_id == session_id]

    records: List[SendRecord] = []
    for problem_id, group in group_attempts_by_problem(attempts).items():
        first_sent = next((a for a in group if a.is_send), None)
        if first_sent is None:
            continue
        attempts_to_send = sum(1 for a in group if a.created_at <= first_sent.created_at)
        records.append(SendRecord(
            problem_id=problem_id,
            first_sent_at=first_sent.created_at,
            attempts_to_send=attempts_to_send,
            seq=first_sent.seq,
        ))

    records.sort(key=lambda r: (r.first_sent_at, r.seq))
    return records


def sent_problem_ids(attempts: Iterable[Attempt]) -> set:
    return {a.problem_id for a in attempts if a.is_send}


#------------------------------------------------------------------------------
# CONVERSION AGGREGATION
#------------------------------------------------------------------------------
def conversion_rate(attempts: int, sends: int) -> float:
    """sends / attempts, 0.0 when there are no attempts."""
    if attempts <= 0:
        return 0.0
    return min(1.0, max(0.0, sends / attempts))


def compute_conversion(attempts: Iterable[Attempt]) -> Conversion:
    attempt_count = 0
    send_count = 0
    for attempt in attempts:
        attempt_count += 1
        if attempt.is_send:
            send_count += 1
    return Conversion(attempts=attempt_count, sends=send_count,
                      rate=conversion_rate(attempt_count, send_count))


def rolling_conversion(attempts: Iterable[Attempt], days: int = config.ROLLING_WINDOW_DAYS,
                       now: Optional[datetime] = None) -> Conversion:
    """Conversion over attempts with created_at >= now - days."""
    now = now or utc_now()
    since = now - timedelta(days=days)
    return compute_conversion(a for a in attempts if a.created_at >= since)


@dataclass(frozen=True)
class WeeklyConversion:
    week: date
    attempts: int
    sends: int
    rate: float

    def to_dict(self) -> Dict[str, object]:
        return {'week': self.week.isoformat(), 'attempts': self.attempts,
                'sends': self.sends, 'rate': self.rate}


def weekly_conversion(attempts: Iterable[Attempt], weeks: int = config.WEEKLY_WINDOW_WEEKS,
                      now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> List[WeeklyConversion]:
    """
    Conversion per Monday-anchored calendar week.

    Only the trailing ``weeks`` weeks (current week included) are kept and
    weeks without attempts are not emitted.

    Returns:
        Buckets sorted ascending by week key (the week's Monday).
    """
    now = now or utc_now()
    first_week = week_start(local_day(now, tz)) - timedelta(weeks=max(weeks, 1) - 1)

    rows = []
    for attempt in attempts:
        week = week_start(local_day(attempt.created_at, tz))
        if week >= first_week:
            rows.append({'week': week, 'sent': attempt.is_send})
    if not rows:
        return []

    frame = pd.DataFrame(rows)
    grouped = frame.groupby('week')['sent'].agg(['size', 'sum']).sort_index()

    buckets = []
    for week, row in grouped.iterrows():
        attempt_count = int(row['size'])
        send_count = int(row['sum'])
        buckets.append(WeeklyConversion(
            week=week,
            attempts=attempt_count,
            sends=send_count,
            rate=conversion_rate(attempt_count, send_count),
        ))
    return buckets


#------------------------------------------------------------------------------
# EFFICIENCY
#------------------------------------------------------------------------------
def efficiency_bucket(attempts_to_send: int) -> str:
    """Classify a send as 'flash', 'learn' or 'project' by attempts needed."""
    if attempts_to_send <= config.FLASH_MAX_ATTEMPTS:
        return 'flash'
    if attempts_to_send <= config.LEARN_MAX_ATTEMPTS:
        return 'learn'
    return 'project'


def efficiency_histogram(sends: Iterable[SendRecord]) -> Dict[str, int]:
    histogram = {'flash': 0, 'learn': 0, 'project': 0}
    for record in sends:
        histogram[efficiency_bucket(record.attempts_to_send)] += 1
    return histogram


def average_attempts_per_send(sends: Sequence[SendRecord]) -> Optional[float]:
    if not sends:
        return None
    return float(np.mean([r.attempts_to_send for r in sends]))


@dataclass(frozen=True)
class WorkedProblems:
    worked: int
    total: int
    pct: Optional[float]

    def to_dict(self) -> Dict[str, object]:
        return {'worked': self.worked, 'total': self.total, 'pct': self.pct}


def worked_problems(problems: Sequence[Problem], attempts: Iterable[Attempt]) -> WorkedProblems:
    """Share of known problems with at least one attempt."""
    known_ids = {p.id for p in problems}
    worked = len({a.problem_id for a in attempts if a.problem_id in known_ids})
    total = len(known_ids)
    pct = worked / total * 100 if total > 0 else None
    return WorkedProblems(worked=worked, total=total, pct=pct)
