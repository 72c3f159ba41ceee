"""
Grade Resolution

This module maps a problem's grade reference onto a rank (a position in a
difficulty order) plus a display label and color.

Two grading schemes compete:

1. Gym grades: the home gym's own grade list (usually hold colors or custom
   names). Ranks come from the list order and are authoritative, but only
   for problems logged at the home gym. Grades of different gyms are never
   comparable.
2. Free-text grades: a fixed Fontainebleau-style vocabulary, matched as a
   case-insensitive substring of the problem's grade label.

Ranks from the two schemes share one integer axis. That mix is an
approximation: a non-home-gym send is placed by its text token alone.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import config
from models import GradeInfo, Gym, GymGrade, Problem

logger = logging.getLogger(__name__)

SOURCE_HOME = 'home'
SOURCE_TEXT = 'text'


def _grade_sort_key(grade: GymGrade):
    # Missing sort positions go last, then creation time, then load order
    return (
        grade.sort_order is None,
        grade.sort_order if grade.sort_order is not None else 0,
        grade.created_at is None,
        grade.created_at.timestamp() if grade.created_at is not None else 0.0,
        grade.seq,
    )


def order_gym_grades(grades: Iterable[GymGrade]) -> List[GymGrade]:
    """Order one gym's grades from easiest to hardest."""
    return sorted(grades, key=_grade_sort_key)


def extract_grade_token(grade: Optional[str],
                        vocabulary: Sequence[str] = config.FALLBACK_GRADE_ORDER) -> Optional[str]:
    """Return the first vocabulary token contained in the free-text grade, if any."""
    if not grade:
        return None
    lower = grade.lower()
    for token in vocabulary:
        if token in lower:
            return token
    return None


def fallback_grade_rank(grade: Optional[str],
                        vocabulary: Sequence[str] = config.FALLBACK_GRADE_ORDER) -> Optional[int]:
    token = extract_grade_token(grade, vocabulary)
    if token is None:
        return None
    return list(vocabulary).index(token)


class GradeResolver:
    """
    Resolves problems to ranks using the home gym's grade list first and
    the free-text vocabulary as fallback.
    """

    def __init__(self, home_gym: Optional[Gym], grades: Iterable[GymGrade],
                 vocabulary: Sequence[str] = config.FALLBACK_GRADE_ORDER):
        self.home_gym = home_gym
        self.vocabulary = list(vocabulary)
        home_id = home_gym.id if home_gym is not None else None
        # Only the home gym's grades carry a meaningful order
        self.home_grades: List[GymGrade] = order_gym_grades(
            g for g in grades if home_id is not None and g.gym_id == home_id
        )
        self._home_index: Dict[str, int] = {g.id: idx for idx, g in enumerate(self.home_grades)}

    @property
    def home_gym_id(self) -> Optional[str]:
        return self.home_gym.id if self.home_gym is not None else None

    def resolve(self, problem: Problem) -> GradeInfo:
        """
        Resolve a problem's grade.

        Args:
            problem: The problem to grade.

        Returns:
            GradeInfo with rank None when neither scheme recognizes the grade.
            The label always falls back to the free-text grade for display.
        """
        if (self.home_gym_id is not None
                and problem.gym_id == self.home_gym_id
                and problem.grade_id is not None
                and problem.grade_id in self._home_index):
            idx = self._home_index[problem.grade_id]
            grade = self.home_grades[idx]
            return GradeInfo(rank=idx, label=grade.name, color=grade.color, source=SOURCE_HOME)

        label = problem.grade or config.UNKNOWN_GRADE_LABEL
        rank = fallback_grade_rank(problem.grade, self.vocabulary)
        if rank is not None:
            return GradeInfo(rank=rank, label=label, color=None, source=SOURCE_TEXT)

        logger.debug("Problem %s has no rankable grade (%r)", problem.id, problem.grade)
        return GradeInfo(rank=None, label=label, color=None, source=None)

    def resolve_all(self, problems: Iterable[Problem]) -> Dict[str, GradeInfo]:
        return {p.id: self.resolve(p) for p in problems}
