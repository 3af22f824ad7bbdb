"""
Detección de cruces entre secciones.

Las horas se comparan como cadenas "HH:MM" con relleno de ceros, por lo que el
orden lexicográfico coincide con el orden cronológico.
"""
import re
from typing import Iterable, Sequence

from .model import CourseSection, MeetingPattern

_TIME_RE = re.compile(r"\d{2}:\d{2}")


def is_wall_time(value) -> bool:
    return isinstance(value, str) and bool(_TIME_RE.fullmatch(value))


def overlaps(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    # Horas mal formadas -> "sin cruce"; la validación ocurre antes.
    if not all(is_wall_time(t) for t in (start_a, end_a, start_b, end_b)):
        return False
    return start_a < end_b and end_a > start_b


def slots_conflict(a: MeetingPattern, b: MeetingPattern) -> bool:
    if not (a.days & b.days):
        return False
    if not (a.has_times and b.has_times):
        return False
    return overlaps(a.start, a.end, b.start, b.end)


def sections_conflict(a: CourseSection, b: CourseSection) -> bool:
    if not (a.schedule.is_placeable and b.schedule.is_placeable):
        return False
    return any(
        slots_conflict(s1, s2)
        for s1 in a.schedule.slots
        for s2 in b.schedule.slots
    )


def conflicts_with_any(candidate: CourseSection, chosen: Iterable[CourseSection]) -> bool:
    """Compara solo la nueva sección contra las ya elegidas."""
    if not candidate.schedule.is_placeable:
        return False
    return any(sections_conflict(candidate, existing) for existing in chosen)


def conflict_free(sections: Sequence[CourseSection]) -> bool:
    if not sections or len(sections) <= 1:
        return True
    for i in range(len(sections)):
        for j in range(i + 1, len(sections)):
            if sections_conflict(sections[i], sections[j]):
                return False
    return True
