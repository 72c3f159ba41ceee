"""
Daily activity heatmap over a fixed trailing window.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, Iterable, List, Optional

import config
from models import Attempt
from stats import utc_now, local_day


@dataclass(frozen=True)
class HeatmapDay:
    day: date
    attempts: int
    sends: int

    def to_dict(self) -> Dict[str, object]:
        return {'day': self.day.isoformat(), 'attempts': self.attempts, 'sends': self.sends}


def build_heatmap(attempts: Iterable[Attempt], days: int = config.HEATMAP_WINDOW_DAYS,
                  now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> List[HeatmapDay]:
    """
    One entry per calendar day of the trailing window, oldest first.

    The window ends today (inclusive) and always holds exactly ``days``
    entries; days without attempts get explicit zeros.
    """
    if days <= 0:
        return []
    today = local_day(now or utc_now(), tz)
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    first_day = window[0]

    attempt_counts: Counter = Counter()
    send_counts: Counter = Counter()
    for attempt in attempts:
        day = local_day(attempt.created_at, tz)
        if day < first_day or day > today:
            continue
        attempt_counts[day] += 1
        if attempt.is_send:
            send_counts[day] += 1

    return [HeatmapDay(day=day, attempts=attempt_counts[day], sends=send_counts[day]) for day in window]
