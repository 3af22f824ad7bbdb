"""
Puntajes de preferencia de un conjunto de secciones.

- Preferencia horaria: menor es mejor (índice en el ranking de franjas).
- Días en campus: días distintos con al menos una clase no "online".
"""
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .constraints import total_units
from .model import CourseSection, Preferences, ScoreBreakdown

_HOUR_RE = re.compile(r"(\d{1,2}):\d{2}")

COURSE_WEIGHT = 100


def time_of_day_bucket(time: Optional[str]) -> str:
    if not time:
        return "any"
    match = _HOUR_RE.fullmatch(time)
    if not match:
        return "any"
    hour = int(match.group(1))
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    return "evening"


def time_preference_score(sections: Sequence[CourseSection], rank: Sequence[str]) -> int:
    if not rank:
        return 0
    rank = list(rank)
    worst = len(rank)
    score = 0
    for section in sections:
        best_idx = worst
        if section.schedule.is_placeable:
            for slot in section.schedule.slots:
                bucket = time_of_day_bucket(slot.start)
                if bucket in rank:
                    best_idx = min(best_idx, rank.index(bucket))
        score += best_idx
    return score


def campus_day_count(sections: Sequence[CourseSection]) -> int:
    days = set()
    for section in sections:
        if section.schedule.is_tba:
            continue
        for slot in section.schedule.slots:
            if not slot.is_remote:
                days.update(slot.days)
    return len(days)


@dataclass(frozen=True)
class ScheduleMetrics:
    course_count: int
    subject_count: int
    total_units: float
    time_preference_score: int
    campus_days: int

    @property
    def aggregate_score(self) -> float:
        return self.course_count * COURSE_WEIGHT + self.total_units


def measure(sections: Sequence[CourseSection], preferences: Preferences) -> ScheduleMetrics:
    # Si no se minimizan los días, se registra 0 y no interviene en desempates.
    campus = campus_day_count(sections) if preferences.minimize_campus_days else 0
    return ScheduleMetrics(
        course_count=len(sections),
        subject_count=len({s.subject for s in sections}),
        total_units=total_units(sections),
        time_preference_score=time_preference_score(sections, preferences.time_of_day_rank),
        campus_days=campus,
    )


def aggregate_rank(m: ScheduleMetrics, minimize_campus_days: bool) -> Tuple:
    """Orden de los modos exhaustivo y rápido: mayor tupla = mejor."""
    if minimize_campus_days:
        return (-m.campus_days, m.aggregate_score, -m.time_preference_score)
    return (m.aggregate_score, -m.time_preference_score)


def coverage_rank(m: ScheduleMetrics, minimize_campus_days: bool) -> Tuple:
    """Orden del modo parcial: materias, luego unidades, luego franja horaria."""
    if minimize_campus_days:
        return (-m.campus_days, m.subject_count, m.total_units, -m.time_preference_score)
    return (m.subject_count, m.total_units, -m.time_preference_score)


def summarize(sections: Sequence[CourseSection], preferences: Preferences) -> ScoreBreakdown:
    if not sections:
        return ScoreBreakdown()
    m = measure(sections, preferences)
    return ScoreBreakdown(
        schedule=tuple(sections),
        aggregate_score=m.aggregate_score,
        time_preference_score=m.time_preference_score,
        campus_day_count=m.campus_days,
    )
