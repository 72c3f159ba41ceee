import json

import pytest

from data_processing import (InMemoryRepository, SnapshotError, build_progress_payload,
                             load_snapshot, process_data)
from recommendations import ZONE_GROWTH


def _rows():
    problems = [
        {'id': 'p-yellow', 'grade': 'Yellow', 'status': 'sent', 'created_at': '2025-05-01T10:00:00Z',
         'gym_id': 'home', 'grade_id': 'g-yellow'},
        {'id': 'p-blue', 'grade': 'Blue', 'status': 'project', 'created_at': '2025-05-02T10:00:00Z',
         'gym_id': 'home', 'grade_id': 'g-blue'},
        {'id': 'p-away', 'grade': 'Fb 6b', 'status': 'project', 'created_at': '2025-05-03T10:00:00Z',
         'gym_id': 'away', 'grade_id': 'g-away'},
        {'id': 'p-untried', 'grade': None, 'status': 'project', 'created_at': '2025-05-04T10:00:00Z',
         'gym_id': None, 'grade_id': None},
    ]
    attempts = [
        {'problem_id': 'p-yellow', 'session_id': 's1', 'outcome': 'sent', 'created_at': '2025-06-10T18:00:00+00:00'},
        {'problem_id': 'p-blue', 'session_id': 's1', 'outcome': 'crux', 'created_at': '2025-06-10T18:05:00+00:00'},
        {'problem_id': 'p-blue', 'session_id': 's2', 'outcome': 'almost', 'created_at': '2025-06-17T18:00:00+00:00'},
        # status still says 'project': the log is authoritative
        {'problem_id': 'p-blue', 'session_id': 's2', 'outcome': 'sent', 'created_at': '2025-06-17T18:10:00+00:00'},
        {'problem_id': 'p-away', 'session_id': 's2', 'outcome': 'start', 'created_at': '2025-06-17T18:20:00+00:00'},
        {'problem_id': 'p-away', 'session_id': 's2', 'outcome': 'crux', 'created_at': '2025-06-17T18:30:00+00:00'},
        {'problem_id': 'p-away', 'session_id': 's2', 'outcome': 'crux', 'created_at': '2025-06-17T18:40:00+00:00'},
        {'problem_id': 'p-away', 'session_id': 's2', 'outcome': 'almost', 'created_at': '2025-06-17T18:50:00+00:00'},
        {'problem_id': 'p-away', 'session_id': 's2', 'outcome': 'sent', 'created_at': '2025-06-17T19:00:00+00:00'},
        # deleted problem
        {'problem_id': 'p-gone', 'session_id': 's2', 'outcome': 'sent', 'created_at': '2025-06-17T19:10:00+00:00'},
        {'problem_id': 'p-blue', 'session_id': 's2', 'outcome': 'crux', 'created_at': '2025-06-17T19:20:00+00:00'},
        {'problem_id': 'p-blue', 'session_id': 's2', 'outcome': 'crux', 'created_at': '2025-06-17T19:30:00+00:00'},
    ]
    gym_grades = [
        {'id': 'g-blue', 'gym_id': 'home', 'name': 'Blue', 'color': '#0000FF', 'sort_order': 2,
         'created_at': '2025-01-01T00:00:00Z'},
        {'id': 'g-yellow', 'gym_id': 'home', 'name': 'Yellow', 'color': '#FFFF00', 'sort_order': 1,
         'created_at': '2025-01-01T00:00:00Z'},
        {'id': 'g-away', 'gym_id': 'away', 'name': 'Red', 'color': '#FF0000', 'sort_order': 50,
         'created_at': '2025-01-01T00:00:00Z'},
    ]
    gyms = [
        {'id': 'home', 'name': 'Boulderbar', 'is_home': True, 'grading_mode': 'specific'},
        {'id': 'away', 'name': 'Blockfabrik', 'is_home': False, 'grading_mode': 'ranges'},
    ]
    sessions = [
        {'id': 's1', 'date': '2025-06-10', 'energy': 'normal'},
        {'id': 's2', 'date': '2025-06-17', 'energy': None},
    ]
    return dict(problems=problems, attempts=attempts, gym_grades=gym_grades, gyms=gyms, sessions=sessions)


def test_load_snapshot_converts_rows():
    snapshot = load_snapshot(InMemoryRepository(**_rows()))

    assert len(snapshot.problems) == 4
    assert snapshot.home_gym.name == 'Boulderbar'
    assert snapshot.attempts[0].created_at.tzinfo is not None
    assert [a.seq for a in snapshot.attempts[:3]] == [0, 1, 2]
    assert snapshot.sessions[1].energy == 'normal'


def test_load_snapshot_rejects_two_home_gyms():
    rows = _rows()
    rows['gyms'][1]['is_home'] = True

    with pytest.raises(SnapshotError):
        load_snapshot(InMemoryRepository(**rows))


def test_load_snapshot_rejects_malformed_rows():
    rows = _rows()
    rows['attempts'][0]['outcome'] = 'flashed'

    with pytest.raises(SnapshotError):
        load_snapshot(InMemoryRepository(**rows))


def test_load_snapshot_rejects_missing_collection():
    class PartialRepository(InMemoryRepository):
        def list_attempts(self):
            return None

    with pytest.raises(SnapshotError):
        load_snapshot(PartialRepository(**_rows()))


def test_payload(now):
    payload = build_progress_payload(load_snapshot(InMemoryRepository(**_rows())), now=now)

    assert payload.header == {'total_attempts': 12, 'total_problems': 4, 'total_sends': 3,
                              'home_gym_name': 'Boulderbar'}
    # 12 attempts, 4 sends in the last 14 days
    assert (payload.conversion.attempts, payload.conversion.sends) == (12, 4)
    assert payload.zone == 'cruising'
    assert [w.week.isoformat() for w in payload.weekly] == ['2025-06-09', '2025-06-16']
    assert payload.efficiency == {'flash': 1, 'learn': 2, 'project': 0}
    assert payload.avg_attempts_per_send == pytest.approx(3.0)
    assert (payload.worked.worked, payload.worked.total) == (3, 4)
    assert len(payload.heatmap) == 28

    # yellow (home rank 0), blue (home rank 1), away gym falls back to the text token '6b'
    assert [t.label for t in payload.timeline] == ['Yellow', 'Blue', 'Fb 6b']
    assert [s.max_rank_so_far for s in payload.grade_steps] == [0, 1, 12]
    assert payload.hardest['label'] == 'Fb 6b'
    assert payload.hardest['color'] is None

    assert [s.session_id for s in payload.sessions] == ['s2', 's1']
    assert payload.sessions[0].hardest_label == 'Fb 6b'


def test_payload_for_new_user(now):
    payload = build_progress_payload(load_snapshot(InMemoryRepository()), now=now)

    assert payload.hardest is None
    assert payload.grade_steps == []
    assert payload.conversion.rate == 0.0
    assert payload.zone == 'overreaching'
    assert payload.avg_attempts_per_send is None
    assert payload.recommendations[0].title == 'No recent data'
    assert len(payload.heatmap) == 28


def test_payload_to_dict_is_json_serializable(now):
    payload = process_data(InMemoryRepository(**_rows()), now=now)

    data = json.loads(json.dumps(payload.to_dict()))

    assert data['conversion']['zone_meta']['key'] == 'cruising'
    assert data['timeline'][0]['day'] == '2025-06-10'
    assert data['recent_sends'][0]['label'] == 'Fb 6b'
    assert data['heatmap'][-1]['day'] == '2025-06-18'


def test_growth_zone_payload(now):
    rows = _rows()
    rows['attempts'] = [
        {'problem_id': 'p-blue', 'session_id': 's2', 'outcome': 'crux' if i else 'sent',
         'created_at': f'2025-06-17T18:{i:02d}:00Z'}
        for i in range(8)
    ]

    payload = process_data(InMemoryRepository(**rows), now=now)

    assert payload.conversion.rate == 1 / 8
    assert payload.zone == ZONE_GROWTH


@pytest.mark.parametrize('created_at', [None, '', 'not a date'])
def test_load_snapshot_rejects_null_timestamp(created_at):
    rows = _rows()
    rows['attempts'][0]['created_at'] = created_at

    with pytest.raises(SnapshotError):
        load_snapshot(InMemoryRepository(**rows))
