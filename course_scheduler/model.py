# course_scheduler/model.py
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple, Union

DayCode = str
WallTime = str                      # "HH:MM"
Limit = Optional[float]             # None = sin límite

DAY_CODES: Tuple[DayCode, ...] = ("M", "T", "W", "TH", "F", "S", "SU")
TIME_BUCKETS: Tuple[str, ...] = ("morning", "afternoon", "evening", "any")


@dataclass(frozen=True)
class MeetingPattern:
    days: FrozenSet[DayCode]
    start: Optional[WallTime] = None
    end: Optional[WallTime] = None
    room: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return bool(self.room) and "online" in self.room.lower()

    @property
    def has_times(self) -> bool:
        return bool(self.start) and bool(self.end)


@dataclass(frozen=True)
class ParsedSchedule:
    slots: Tuple[MeetingPattern, ...] = ()
    is_tba: bool = False

    @property
    def is_placeable(self) -> bool:
        """True si el horario participa en cruces y huecos (no TBA y con slots)."""
        return not self.is_tba and len(self.slots) > 0


TBA_SCHEDULE = ParsedSchedule(slots=(), is_tba=True)


@dataclass(frozen=True)
class CourseSection:
    id: str
    subject: str
    section: str
    credit_units: Union[str, float, int, None]
    schedule: ParsedSchedule = TBA_SCHEDULE
    title: str = ""
    credited_units: Union[str, float, int, None] = None
    is_closed: bool = False
    enrolled: int = 0
    total_slots: int = 0
    available_slots: int = 1
    offering_dept: Optional[str] = None


@dataclass(frozen=True)
class Constraints:
    max_units: Limit = None
    max_gap_hours: Limit = None


@dataclass(frozen=True)
class Preferences:
    time_of_day_rank: Tuple[str, ...] = ("morning", "afternoon", "evening", "any")
    minimize_campus_days: bool = False


@dataclass(frozen=True)
class TimeRange:
    start: WallTime
    end: WallTime


@dataclass
class ScoreBreakdown:
    schedule: Tuple[CourseSection, ...] = field(default_factory=tuple)
    aggregate_score: float = 0
    time_preference_score: int = 0
    campus_day_count: int = 0

    @property
    def is_empty(self) -> bool:
        return len(self.schedule) == 0
