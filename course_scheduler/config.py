"""
Configuración del generador de horarios.

Incluye un cargador desde YAML (o JSON, que es YAML válido) para dejar las
preferencias, restricciones y parámetros de búsqueda reproducibles.
"""
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .conflicts import is_wall_time
from .constraints import parse_limit
from .eligibility import EligibilityFilter, STATUS_FILTERS
from .errors import InvalidParameterError
from .model import Constraints, DAY_CODES, Preferences, TIME_BUCKETS, TimeRange

SEARCH_MODES = ("exhaustive", "partial", "fast")

DEFAULT_TIME_RANK: List[str] = ["morning", "afternoon", "evening", "any"]


@dataclass
class SchedulerConfig:
    # Restricciones (None o "" = sin límite)
    max_units: Optional[Union[float, str]] = None
    max_gap_hours: Optional[Union[float, str]] = None

    # Preferencias
    time_of_day_rank: List[str] = field(default_factory=lambda: list(DEFAULT_TIME_RANK))
    minimize_campus_days: bool = False

    # Búsqueda
    search_mode: str = "partial"
    small_n_threshold: int = 12
    min_attempts: int = 50
    max_attempts: int = 500
    fast_attempts: int = 1000
    exhaustive_warn_subjects: int = 12
    seed: Optional[int] = 42

    # Elegibilidad de secciones
    excluded_days: List[str] = field(default_factory=list)
    excluded_time_ranges: List[Dict[str, str]] = field(default_factory=list)
    status_filter: str = "all"
    section_types: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchedulerConfig":
        merged = asdict(cls())
        for k, v in data.items():
            if k in merged:
                merged[k] = v
        return cls(**merged)

    def __post_init__(self):
        for name in ("small_n_threshold", "min_attempts", "max_attempts", "fast_attempts", "exhaustive_warn_subjects"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise InvalidParameterError(f"{name} debe ser un entero no negativo: {value!r}")
        if self.min_attempts > self.max_attempts:
            raise InvalidParameterError("min_attempts no puede superar max_attempts")
        if self.search_mode not in SEARCH_MODES:
            raise InvalidParameterError(f"search_mode desconocido: {self.search_mode!r}")
        if self.status_filter not in STATUS_FILTERS:
            raise InvalidParameterError(f"status_filter desconocido: {self.status_filter!r}")
        unknown = [b for b in self.time_of_day_rank if b not in TIME_BUCKETS]
        if unknown:
            raise InvalidParameterError(f"Franjas horarias desconocidas: {unknown}")
        bad_days = [d for d in self.excluded_days if d not in DAY_CODES]
        if bad_days:
            raise InvalidParameterError(f"Días desconocidos: {bad_days}")
        # Falla temprano si los límites son negativos o no numéricos.
        parse_limit(self.max_units, "max_units")
        parse_limit(self.max_gap_hours, "max_gap_hours")
        self.excluded_time_ranges = [_normalize_range(r) for r in self.excluded_time_ranges]

    def preferences(self) -> Preferences:
        return Preferences(
            time_of_day_rank=tuple(self.time_of_day_rank),
            minimize_campus_days=bool(self.minimize_campus_days),
        )

    def constraints(self) -> Constraints:
        return Constraints(
            max_units=parse_limit(self.max_units, "max_units"),
            max_gap_hours=parse_limit(self.max_gap_hours, "max_gap_hours"),
        )

    def eligibility(self) -> EligibilityFilter:
        return EligibilityFilter(
            excluded_days=frozenset(self.excluded_days),
            excluded_time_ranges=tuple(
                TimeRange(start=r["start"], end=r["end"]) for r in self.excluded_time_ranges
            ),
            status=self.status_filter,
            section_types=tuple(self.section_types),
        )


def _wall_time(value: Any, name: str) -> str:
    # YAML 1.1 lee 12:00 sin comillas como entero en base 60 (720).
    if isinstance(value, int) and not isinstance(value, bool):
        hour, minute = divmod(value, 60)
        value = f"{hour:02d}:{minute:02d}"
    if not is_wall_time(value) or int(value[:2]) > 23 or int(value[3:]) > 59:
        raise InvalidParameterError(f"{name} debe tener formato HH:MM: {value!r}")
    return value


def _normalize_range(entry: Any) -> Dict[str, str]:
    if not isinstance(entry, dict) or "start" not in entry or "end" not in entry:
        raise InvalidParameterError(f"Rango horario excluido sin start/end: {entry!r}")
    start = _wall_time(entry["start"], "excluded_time_ranges.start")
    end = _wall_time(entry["end"], "excluded_time_ranges.end")
    if start >= end:
        raise InvalidParameterError(f"Rango horario excluido vacío: {start}-{end}")
    return {"start": start, "end": end}


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    return yaml.safe_load(text) or {}


def load_config(path: str = "config.yaml") -> SchedulerConfig:
    cfg_path = Path(path)
    data = _load_yaml(cfg_path)
    if not isinstance(data, dict):
        raise InvalidParameterError("config.yaml debe contener un objeto mapeo")
    return SchedulerConfig.from_dict(data)
