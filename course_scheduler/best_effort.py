"""
Modo parcial: el mejor subconjunto sin cruces, a lo sumo una sección por materia.

- n <= umbral: se enumera el conjunto potencia completo (2^n).
- n > umbral: construcción voraz aleatorizada repetida varias veces.
"""
import logging
import random
from typing import Iterator, List, Optional, Sequence, Tuple

from .conflicts import conflict_free
from .constraints import admissible, exceeds_max_gap, exceeds_max_units, parse_limit, section_units
from .errors import InvalidParameterError
from .model import Constraints, CourseSection, Preferences
from .scoring import ScheduleMetrics, coverage_rank, measure

logger = logging.getLogger(__name__)

SMALL_N_THRESHOLD = 12
MIN_ATTEMPTS = 50
MAX_ATTEMPTS = 500
NEW_SUBJECT_PRIORITY = 20000
PRIORITY_JITTER = 0.1


def all_subsets(items: Sequence) -> Iterator[Tuple]:
    """Subconjuntos en orden de conteo binario: [], [a], [b], [a, b], [c], ..."""
    n = len(items)
    for mask in range(1 << n):
        yield tuple(items[j] for j in range(n) if mask >> j & 1)


def attempt_count(n: int, min_attempts: int = MIN_ATTEMPTS, max_attempts: int = MAX_ATTEMPTS) -> int:
    return min(max_attempts, max(min_attempts, 2 * n))


class _BestTracker:
    def __init__(self, preferences: Preferences):
        self.minimize = preferences.minimize_campus_days
        self.preferences = preferences
        self.schedule: List[CourseSection] = []
        self.metrics: Optional[ScheduleMetrics] = None

    def offer(self, schedule: Sequence[CourseSection]) -> bool:
        metrics = measure(schedule, self.preferences)
        if self.metrics is None or coverage_rank(metrics, self.minimize) > coverage_rank(self.metrics, self.minimize):
            self.schedule = list(schedule)
            self.metrics = metrics
            return True
        return False


def best_subset_exact(
    sections: Sequence[CourseSection],
    preferences: Preferences,
    constraints: Constraints,
) -> List[CourseSection]:
    max_units = parse_limit(constraints.max_units, "max_units")
    max_gap = parse_limit(constraints.max_gap_hours, "max_gap_hours")
    tracker = _BestTracker(preferences)

    for subset in all_subsets(sections):
        if not subset:
            continue
        subjects = [s.subject for s in subset]
        if len(set(subjects)) != len(subjects):
            continue
        if not conflict_free(subset):
            continue
        if exceeds_max_units(subset, max_units) or exceeds_max_gap(subset, max_gap):
            continue
        tracker.offer(subset)

    return tracker.schedule


def _greedy_attempt(
    pool: List[CourseSection],
    max_units,
    max_gap,
    rng: random.Random,
) -> List[CourseSection]:
    chosen: List[CourseSection] = []
    used_subjects = set()

    while True:
        best_idx = -1
        best_priority = -1.0
        for i, candidate in enumerate(pool):
            if candidate.subject in used_subjects:
                continue
            if not admissible(candidate, chosen, max_units, max_gap):
                continue
            # Solo entran materias nuevas; el empate exacto se rompe con ruido.
            priority = NEW_SUBJECT_PRIORITY + section_units(candidate) + rng.random() * PRIORITY_JITTER
            if priority > best_priority:
                best_idx = i
                best_priority = priority

        if best_idx < 0:
            return chosen
        picked = pool.pop(best_idx)
        chosen.append(picked)
        used_subjects.add(picked.subject)


def best_subset_greedy(
    sections: Sequence[CourseSection],
    preferences: Preferences,
    constraints: Constraints,
    rng: Optional[random.Random] = None,
    attempts: Optional[int] = None,
    min_attempts: int = MIN_ATTEMPTS,
    max_attempts: int = MAX_ATTEMPTS,
) -> List[CourseSection]:
    if attempts is not None and attempts < 0:
        raise InvalidParameterError(f"attempts no puede ser negativo: {attempts}")
    if min_attempts < 0 or max_attempts < 0:
        raise InvalidParameterError("min_attempts y max_attempts deben ser no negativos")
    rng = rng or random.Random()
    max_units = parse_limit(constraints.max_units, "max_units")
    max_gap = parse_limit(constraints.max_gap_hours, "max_gap_hours")
    n_attempts = attempt_count(len(sections), min_attempts, max_attempts) if attempts is None else attempts
    tracker = _BestTracker(preferences)

    for attempt in range(n_attempts):
        pool = list(sections)
        rng.shuffle(pool)
        chosen = _greedy_attempt(pool, max_units, max_gap, rng)
        if chosen and tracker.offer(chosen):
            logger.debug("Intento %d mejora: %s", attempt, tracker.metrics)

    return tracker.schedule


def generate_best_effort(
    sections: Sequence[CourseSection],
    preferences: Preferences,
    constraints: Constraints,
    rng: Optional[random.Random] = None,
    small_n_threshold: int = SMALL_N_THRESHOLD,
    min_attempts: int = MIN_ATTEMPTS,
    max_attempts: int = MAX_ATTEMPTS,
) -> List[CourseSection]:
    if small_n_threshold < 0:
        raise InvalidParameterError(f"small_n_threshold no puede ser negativo: {small_n_threshold}")
    if not sections:
        return []

    if len(sections) <= small_n_threshold:
        logger.debug("Modo parcial exacto sobre %d secciones", len(sections))
        return best_subset_exact(sections, preferences, constraints)

    logger.debug(
        "Modo parcial heurístico sobre %d secciones (%d intentos)",
        len(sections), attempt_count(len(sections), min_attempts, max_attempts),
    )
    return best_subset_greedy(
        sections, preferences, constraints, rng=rng,
        min_attempts=min_attempts, max_attempts=max_attempts,
    )
