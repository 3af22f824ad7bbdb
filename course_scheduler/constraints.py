# course_scheduler/constraints.py
import math
from collections import defaultdict
from typing import Dict, List, Sequence, Tuple, Union

from .conflicts import conflicts_with_any, is_wall_time
from .errors import InvalidParameterError
from .model import CourseSection, Limit

UNBOUNDED_ALIASES = ("", "unbounded", "none")

LimitLike = Union[Limit, str]


def parse_units(value) -> float:
    """Unidades como número; valores no interpretables cuentan como 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        units = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(units) or math.isinf(units):
        return 0.0
    return units


def section_units(section: CourseSection) -> float:
    raw = section.credited_units if section.credited_units is not None else section.credit_units
    return parse_units(raw)


def total_units(sections: Sequence[CourseSection]) -> float:
    return sum(section_units(s) for s in sections)


def parse_limit(value: LimitLike, name: str = "limit") -> Limit:
    """
    Normaliza un límite: None/""/"unbounded" -> None, cadenas numéricas -> float.
    Un límite negativo o no numérico es un error del llamador.
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if text.lower() in UNBOUNDED_ALIASES:
            return None
        try:
            value = float(text)
        except ValueError:
            raise InvalidParameterError(f"{name} debe ser numérico o 'unbounded': {text!r}")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise InvalidParameterError(f"{name} inválido: {value!r}")
    if value < 0:
        raise InvalidParameterError(f"{name} no puede ser negativo: {value}")
    return float(value)


def exceeds_max_units(sections: Sequence[CourseSection], max_units: LimitLike) -> bool:
    limit = parse_limit(max_units, "max_units")
    if limit is None:
        return False
    return total_units(sections) > limit


def _to_minutes(t: str) -> int:
    h, m = t.split(":")
    return int(h) * 60 + int(m)


def slots_by_day(sections: Sequence[CourseSection]) -> Dict[str, List[Tuple[str, str]]]:
    # Las clases "online" también cuentan para los huecos.
    by_day: Dict[str, List[Tuple[str, str]]] = defaultdict(list)
    for section in sections:
        if section.schedule.is_tba:
            continue
        for slot in section.schedule.slots:
            if not (is_wall_time(slot.start) and is_wall_time(slot.end)):
                continue
            for day in slot.days:
                by_day[day].append((slot.start, slot.end))
    return by_day


def exceeds_max_gap(sections: Sequence[CourseSection], max_gap_hours: LimitLike) -> bool:
    limit = parse_limit(max_gap_hours, "max_gap_hours")
    if limit is None:
        return False
    for slots in slots_by_day(sections).values():
        slots.sort(key=lambda s: s[0])
        for (_, prev_end), (curr_start, _) in zip(slots, slots[1:]):
            gap = (_to_minutes(curr_start) - _to_minutes(prev_end)) / 60.0
            if gap > limit:
                return True
    return False


def violates_constraints(sections: Sequence[CourseSection], max_units: LimitLike, max_gap_hours: LimitLike) -> bool:
    return exceeds_max_units(sections, max_units) or exceeds_max_gap(sections, max_gap_hours)


def admissible(
    candidate: CourseSection,
    chosen: Sequence[CourseSection],
    max_units: LimitLike,
    max_gap_hours: LimitLike,
) -> bool:
    """¿Se puede agregar `candidate` sin romper unidades, huecos ni cruces?"""
    tentative = list(chosen) + [candidate]
    if violates_constraints(tentative, max_units, max_gap_hours):
        return False
    return not conflicts_with_any(candidate, chosen)
