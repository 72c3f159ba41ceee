from datetime import date, timedelta
from zoneinfo import ZoneInfo

import pytest

from heatmap import build_heatmap


@pytest.mark.parametrize('days', [1, 7, 28, 90])
def test_heatmap_has_exactly_window_length_entries(days, now):
    heatmap = build_heatmap([], days=days, now=now)

    assert len(heatmap) == days
    assert all(d.attempts == 0 and d.sends == 0 for d in heatmap)


def test_heatmap_is_oldest_first_and_ends_today(now):
    heatmap = build_heatmap([], days=28, now=now)

    assert heatmap[-1].day == date(2025, 6, 18)
    assert heatmap[0].day == date(2025, 6, 18) - timedelta(days=27)
    assert all(b.day - a.day == timedelta(days=1) for a, b in zip(heatmap, heatmap[1:]))


def test_heatmap_counts_and_zero_fills(make_attempt, now):
    attempts = [
        make_attempt('p1', 'crux', days_ago=0),
        make_attempt('p1', 'sent', days_ago=0, minutes=10),
        make_attempt('p2', 'almost', days_ago=3),
        make_attempt('p3', 'sent', days_ago=40),
    ]

    heatmap = build_heatmap(attempts, days=7, now=now)
    by_day = {d.day: d for d in heatmap}

    assert (by_day[date(2025, 6, 18)].attempts, by_day[date(2025, 6, 18)].sends) == (2, 1)
    assert (by_day[date(2025, 6, 15)].attempts, by_day[date(2025, 6, 15)].sends) == (1, 0)
    assert by_day[date(2025, 6, 16)].attempts == 0
    assert sum(d.attempts for d in heatmap) == 3


def test_heatmap_uses_local_days(make_attempt, now):
    # 23:30 UTC on 2025-06-17 is already 2025-06-18 in Vienna
    attempt = make_attempt('p1', 'sent', days_ago=1, minutes=11 * 60 + 30)

    utc = build_heatmap([attempt], days=2, now=now)
    vienna = build_heatmap([attempt], days=2, now=now, tz=ZoneInfo('Europe/Vienna'))

    assert [d.attempts for d in utc] == [1, 0]
    assert [d.attempts for d in vienna] == [0, 1]


def test_non_positive_window_is_empty(now):
    assert build_heatmap([], days=0, now=now) == []
