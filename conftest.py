from datetime import datetime, timedelta, timezone

import pytest

from models import Attempt, GymGrade, Gym, Problem, SendRecord

# Wednesday; the week starts on Monday 2025-06-16
NOW = datetime(2025, 6, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_attempt():
    counter = {'seq': 0}

    def _make(problem_id, outcome='crux', minutes=0, days_ago=0, session_id='s1'):
        counter['seq'] += 1
        return Attempt(
            problem_id=problem_id,
            session_id=session_id,
            outcome=outcome,
            created_at=NOW - timedelta(days=days_ago) + timedelta(minutes=minutes),
            seq=counter['seq'],
        )

    return _make


@pytest.fixture
def make_problem():
    def _make(problem_id, grade=None, gym_id=None, grade_id=None, status='project'):
        return Problem(id=problem_id, grade=grade, status=status, created_at=NOW - timedelta(days=60),
                       gym_id=gym_id, grade_id=grade_id)

    return _make


@pytest.fixture
def make_send():
    def _make(problem_id, attempts_to_send=1, days_ago=0, seq=0):
        return SendRecord(problem_id=problem_id, first_sent_at=NOW - timedelta(days=days_ago),
                          attempts_to_send=attempts_to_send, seq=seq)

    return _make


@pytest.fixture
def home_gym():
    return Gym(id='home', name='Boulderbar', is_home=True)


@pytest.fixture
def home_grades():
    # Stored out of order on purpose
    return [
        GymGrade(id='black', gym_id='home', name='Black', color='#000000', sort_order=4, seq=0),
        GymGrade(id='yellow', gym_id='home', name='Yellow', color='#FFFF00', sort_order=1, seq=1),
        GymGrade(id='green', gym_id='home', name='Green', color='#00FF00', sort_order=2, seq=2),
        GymGrade(id='blue', gym_id='home', name='Blue', color='#0000FF', sort_order=3, seq=3),
        GymGrade(id='other-red', gym_id='other', name='Red', color='#FF0000', sort_order=9, seq=4),
    ]
