# course_scheduler/exhaustive.py
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .conflicts import conflict_free, conflicts_with_any
from .constraints import exceeds_max_gap, exceeds_max_units, parse_limit
from .model import Constraints, CourseSection, Preferences, ScoreBreakdown
from .scoring import ScheduleMetrics, aggregate_rank, measure

logger = logging.getLogger(__name__)


class ExhaustiveSolver:
    """
    Búsqueda con retroceso: exactamente una sección por materia.

    Si ninguna sección de una materia es admisible, esa rama muere sin
    solución (no se "salta" la materia). El recorrido sigue el orden del
    catálogo, así que el resultado es reproducible.
    """

    def __init__(
        self,
        subject_to_sections: Mapping[str, Sequence[CourseSection]],
        preferences: Preferences,
        constraints: Constraints,
    ):
        self.subjects: List[str] = list(subject_to_sections.keys())
        self.options: Dict[str, Tuple[CourseSection, ...]] = {
            s: tuple(subject_to_sections[s]) for s in self.subjects
        }
        self.preferences = preferences
        self.max_units = parse_limit(constraints.max_units, "max_units")
        self.max_gap_hours = parse_limit(constraints.max_gap_hours, "max_gap_hours")
        self.best: Optional[Tuple[CourseSection, ...]] = None
        self.best_metrics: Optional[ScheduleMetrics] = None
        self.completed = 0

    def search_space(self) -> int:
        total = 1
        for subject in self.subjects:
            total *= len(self.options[subject])
        return total

    def _consider(self, chosen: Tuple[CourseSection, ...]) -> None:
        # Re-validación completa de la asignación terminada.
        if not conflict_free(chosen):
            return
        if exceeds_max_units(chosen, self.max_units):
            return
        if exceeds_max_gap(chosen, self.max_gap_hours):
            return
        self.completed += 1

        metrics = measure(chosen, self.preferences)
        minimize = self.preferences.minimize_campus_days
        if self.best_metrics is None or aggregate_rank(metrics, minimize) > aggregate_rank(self.best_metrics, minimize):
            self.best = chosen
            self.best_metrics = metrics

    def _backtrack(self, idx: int, chosen: Tuple[CourseSection, ...]) -> None:
        if idx == len(self.subjects):
            self._consider(chosen)
            return

        for candidate in self.options[self.subjects[idx]]:
            if conflicts_with_any(candidate, chosen):
                continue
            self._backtrack(idx + 1, chosen + (candidate,))

    def solve(self) -> ScoreBreakdown:
        logger.debug(
            "Búsqueda exhaustiva: %d materias, %d combinaciones posibles",
            len(self.subjects), self.search_space(),
        )
        self._backtrack(0, ())

        if self.best is None or self.best_metrics is None:
            logger.debug("Sin asignación completa válida")
            return ScoreBreakdown()

        logger.debug(
            "Mejor horario: %d secciones, puntaje=%s, pref=%d, días=%d (%d completas evaluadas)",
            len(self.best), self.best_metrics.aggregate_score,
            self.best_metrics.time_preference_score, self.best_metrics.campus_days, self.completed,
        )
        return ScoreBreakdown(
            schedule=self.best,
            aggregate_score=self.best_metrics.aggregate_score,
            time_preference_score=self.best_metrics.time_preference_score,
            campus_day_count=self.best_metrics.campus_days,
        )


def generate_exhaustive(
    subject_to_sections: Mapping[str, Sequence[CourseSection]],
    preferences: Preferences,
    constraints: Constraints,
) -> ScoreBreakdown:
    return ExhaustiveSolver(subject_to_sections, preferences, constraints).solve()
