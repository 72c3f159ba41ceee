"""
Coaching zones and recommendations.

Conversion rate (sends / attempts) is mapped onto four ordered zones. Each
zone carries display metadata and a short piece of coaching copy. A second
heuristic looks at the trailing window as a whole and suggests what to
focus on next.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import config
from models import Conversion
from stats import WorkedProblems

ZONE_CRUISING = 'cruising'
ZONE_GROWTH = 'growth'
ZONE_LIMIT = 'limit'
ZONE_OVERREACHING = 'overreaching'


@dataclass(frozen=True)
class Zone:
    key: str
    label: str
    min_rate: float
    color: str
    hint: str
    coach_title: str
    coach_body: str

    def to_dict(self) -> Dict[str, object]:
        return {
            'key': self.key,
            'label': self.label,
            'min_rate': self.min_rate,
            'color': self.color,
            'hint': self.hint,
            'coach': {'title': self.coach_title, 'body': self.coach_body},
        }


# Highest threshold first; the first zone whose lower bound is met wins
ZONES: List[Zone] = [
    Zone(
        key=ZONE_CRUISING,
        label='Cruising',
        min_rate=config.ZONE_CRUISING_MIN_RATE,
        color='#22C55E',
        hint='Mostly comfortable',
        coach_title='You’re cruising',
        coach_body='You convert a lot of attempts into sends. Add 1 slightly harder '
                   '“learning project” next session to keep progressing.',
    ),
    Zone(
        key=ZONE_GROWTH,
        label='Growth',
        min_rate=config.ZONE_GROWTH_MIN_RATE,
        color='#EAB308',
        hint='Ideal learning zone',
        coach_title='Healthy growth zone',
        coach_body='Nice balance: you’re pushing but still converting. Keep the mix: '
                   'a few confidence sends + 1–2 projects.',
    ),
    Zone(
        key=ZONE_LIMIT,
        label='Limit',
        min_rate=config.ZONE_LIMIT_MIN_RATE,
        color='#F97316',
        hint='Hard projecting',
        coach_title='You’re pushing your limit',
        coach_body='Lower conversion is normal here. Prioritize rest (2–3 min), repeat '
                   'quality attempts, and don’t spread yourself too thin.',
    ),
    Zone(
        key=ZONE_OVERREACHING,
        label='Overreaching',
        min_rate=0.0,
        color='#EF4444',
        hint='Too hard right now',
        coach_title='Likely overreaching',
        coach_body='Very low conversion often means problems are too far above your current '
                   'level. Next session: choose easier “learnable” projects and '
                   'rebuild momentum.',
    ),
]

ZONES_BY_KEY: Dict[str, Zone] = {zone.key: zone for zone in ZONES}


def classify_zone(rate: float) -> str:
    """
    Map a conversion rate to its coaching zone key.

    Lower bounds are inclusive, so 0.05, 0.12 and 0.25 resolve to the higher
    zone. Rates below zero (or NaN) land in 'overreaching'.
    """
    for zone in ZONES[:-1]:
        if rate >= zone.min_rate:
            return zone.key
    return ZONE_OVERREACHING


def zone_meta(key: str) -> Zone:
    return ZONES_BY_KEY[key]


def attempts_per_send_hint(rate: float) -> int:
    """Rough 'one send every N attempts' figure for display."""
    return round(1 / max(0.01, rate))


#------------------------------------------------------------------------------
# TRAILING-WINDOW RECOMMENDATIONS
#------------------------------------------------------------------------------
@dataclass(frozen=True)
class Recommendation:
    title: str
    body: str

    def to_dict(self) -> Dict[str, str]:
        return {'title': self.title, 'body': self.body}


def recommend(recent: Conversion, worked: Optional[WorkedProblems] = None,
              limit: int = config.MAX_RECOMMENDATIONS) -> List[Recommendation]:
    """
    Suggest what to focus on based on the trailing window.

    Args:
        recent: Conversion over the rolling window.
        worked: Worked-problem counts, used for the untried-projects hint.
        limit: Maximum number of recommendations returned.

    Returns:
        Recommendations in priority order.
    """
    recos: List[Recommendation] = []

    if recent.attempts == 0:
        recos.append(Recommendation(
            title='No recent data',
            body='Log 1–2 attempts this week to unlock meaningful trends.',
        ))
        return recos[:limit]

    if recent.rate < config.RECO_PROJECTION_MAX_RATE and recent.attempts >= config.RECO_PROJECTION_MIN_ATTEMPTS:
        recos.append(Recommendation(
            title='Projection week',
            body='You’re putting in work but sends are low. Pick 1–2 projects and repeat '
                 'quality attempts (rest 2–3 min) instead of spreading tries across many problems.',
        ))
    elif recent.rate >= config.RECO_FLOW_MIN_RATE and recent.sends >= config.RECO_FLOW_MIN_SENDS:
        recos.append(Recommendation(
            title='Flow is high',
            body='Nice, you’re converting attempts into sends. Consider trying 1 '
                 '“just above comfort” grade to nudge your ceiling.',
        ))
    elif recent.attempts < config.RECO_LOW_VOLUME_MAX_ATTEMPTS:
        recos.append(Recommendation(
            title='Low volume',
            body='You’re climbing a bit less recently. Even one extra short session can boost '
                 'consistency without overloading.',
        ))
    else:
        recos.append(Recommendation(
            title='Balanced progress',
            body='Steady effort. Keep your mix: a few warm-up sends + 1–2 harder projects.',
        ))

    if (worked is not None and worked.pct is not None
            and worked.pct < config.RECO_WORKED_MIN_PCT
            and worked.total >= config.RECO_WORKED_MIN_PROBLEMS):
        recos.append(Recommendation(
            title='Too many untried projects',
            body=f'Only {worked.worked} of {worked.total} projects have attempts. Either prune old '
                 f'projects or commit to trying each at least once.',
        ))

    return recos[:limit]
