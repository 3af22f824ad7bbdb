"""
Modo rápido: muestreo aleatorio de horarios completos.

Cada intento recorre las materias en orden, baraja sus secciones y toma la
primera que no cruza con lo ya elegido. Las combinaciones ya probadas (conjunto
del llamador) se descartan para que llamadas sucesivas propongan horarios nuevos.
"""
import logging
import random
from typing import Mapping, MutableSet, Optional, Sequence, Tuple

from .conflicts import conflict_free, conflicts_with_any
from .constraints import exceeds_max_gap, exceeds_max_units, parse_limit
from .eligibility import combination_key
from .errors import InvalidParameterError
from .model import Constraints, CourseSection, Preferences, ScoreBreakdown
from .scoring import aggregate_rank, measure

logger = logging.getLogger(__name__)

FAST_ATTEMPTS = 1000


def _sample_once(
    subject_to_sections: Mapping[str, Sequence[CourseSection]],
    rng: random.Random,
) -> Tuple[CourseSection, ...]:
    chosen: Tuple[CourseSection, ...] = ()
    for sections in subject_to_sections.values():
        shuffled = list(sections)
        rng.shuffle(shuffled)
        for candidate in shuffled:
            if not conflicts_with_any(candidate, chosen):
                chosen = chosen + (candidate,)
                break
    return chosen


def generate_fast(
    subject_to_sections: Mapping[str, Sequence[CourseSection]],
    preferences: Preferences,
    constraints: Constraints,
    rng: Optional[random.Random] = None,
    tried: Optional[MutableSet[str]] = None,
    max_attempts: int = FAST_ATTEMPTS,
) -> ScoreBreakdown:
    if max_attempts < 0:
        raise InvalidParameterError(f"max_attempts no puede ser negativo: {max_attempts}")
    rng = rng or random.Random()
    tried = tried if tried is not None else set()
    max_units = parse_limit(constraints.max_units, "max_units")
    max_gap = parse_limit(constraints.max_gap_hours, "max_gap_hours")
    minimize = preferences.minimize_campus_days
    n_subjects = len(subject_to_sections)

    best: Tuple[CourseSection, ...] = ()
    best_metrics = None
    for attempt in range(max_attempts):
        chosen = _sample_once(subject_to_sections, rng)
        if not conflict_free(chosen):
            continue
        if exceeds_max_units(chosen, max_units) or exceeds_max_gap(chosen, max_gap):
            continue
        key = combination_key(chosen)
        if key in tried:
            continue
        tried.add(key)

        metrics = measure(chosen, preferences)
        if best_metrics is None or aggregate_rank(metrics, minimize) > aggregate_rank(best_metrics, minimize):
            best, best_metrics = chosen, metrics

        if len(best) == n_subjects:
            logger.debug("Horario completo en el intento %d", attempt)
            break

    if not best or best_metrics is None:
        return ScoreBreakdown()
    return ScoreBreakdown(
        schedule=best,
        aggregate_score=best_metrics.aggregate_score,
        time_preference_score=best_metrics.time_preference_score,
        campus_day_count=best_metrics.campus_days,
    )
