# course_scheduler/eligibility.py
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from .conflicts import overlaps
from .errors import InvalidParameterError
from .model import CourseSection, TimeRange

STATUS_FILTERS = ("all", "open", "closed")
SECTION_TYPES = ("AP3", "AP4", "AP5")


@dataclass(frozen=True)
class EligibilityFilter:
    excluded_days: FrozenSet[str] = frozenset()
    excluded_time_ranges: Tuple[TimeRange, ...] = ()
    status: str = "all"
    section_types: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.status not in STATUS_FILTERS:
            raise InvalidParameterError(f"Filtro de estado desconocido: {self.status!r}")


def section_type_suffix(section: str) -> Optional[str]:
    """'BSIT-1A-AP3' -> 'AP3'; None si el sufijo no es un tipo conocido."""
    last = section.split("-")[-1]
    return last if last in SECTION_TYPES else None


def _slot_excluded(slot, flt: EligibilityFilter) -> bool:
    if slot.days & flt.excluded_days:
        return True
    for window in flt.excluded_time_ranges:
        if window.start and window.end and slot.start and slot.end:
            if overlaps(slot.start, slot.end, window.start, window.end):
                return True
    return False


def is_eligible(section: CourseSection, flt: EligibilityFilter) -> bool:
    if flt.status == "open" and section.is_closed:
        return False
    if flt.status == "closed" and not section.is_closed:
        return False
    if section.available_slots <= 0:
        return False
    if flt.section_types:
        suffix = section_type_suffix(section.section)
        if suffix is None or suffix not in flt.section_types:
            return False
    # TBA y horarios sin slots siempre pasan los filtros de día/hora.
    if not section.schedule.is_placeable:
        return True
    return not any(_slot_excluded(slot, flt) for slot in section.schedule.slots)


def filter_eligible(sections: Sequence[CourseSection], flt: EligibilityFilter) -> List[CourseSection]:
    return [s for s in sections if is_eligible(s, flt)]


def group_by_subject(sections: Sequence[CourseSection]) -> Dict[str, List[CourseSection]]:
    grouped: Dict[str, List[CourseSection]] = {}
    for section in sections:
        grouped.setdefault(section.subject, []).append(section)
    return grouped


def combination_key(sections: Sequence[CourseSection]) -> str:
    return ",".join(sorted(s.id for s in sections))


def schedule_key(section: CourseSection) -> str:
    """Identificador estable de una sección dentro de un horario: 'id-materia-sección'."""
    return f"{section.id}-{section.subject}-{section.section}"
