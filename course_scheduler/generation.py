# course_scheduler/generation.py
import logging
import random
from typing import MutableSet, Optional, Sequence

from .best_effort import generate_best_effort
from .config import SEARCH_MODES, SchedulerConfig
from .conflicts import conflict_free
from .eligibility import group_by_subject
from .errors import InvalidParameterError
from .exhaustive import generate_exhaustive
from .model import Constraints, CourseSection, Preferences, ScoreBreakdown
from .sampling import generate_fast
from .scoring import summarize

logger = logging.getLogger(__name__)


def generate_schedule(
    sections: Sequence[CourseSection],
    preferences: Preferences,
    constraints: Constraints,
    mode: str = "partial",
    rng: Optional[random.Random] = None,
    tried: Optional[MutableSet[str]] = None,
    cfg: Optional[SchedulerConfig] = None,
) -> ScoreBreakdown:
    """
    Genera el mejor horario para las secciones elegibles según el modo:
    - exhaustive: una sección por materia, o vacío si es imposible.
    - partial: la mayor cobertura de materias/unidades posible.
    - fast: muestreo aleatorio, evitando combinaciones ya probadas.
    """
    if mode not in SEARCH_MODES:
        raise InvalidParameterError(f"Modo de búsqueda desconocido: {mode!r}")
    cfg = cfg or SchedulerConfig()
    if rng is None:
        rng = random.Random(cfg.seed)

    by_subject = group_by_subject(sections)
    logger.info("Generando horario (%s): %d secciones, %d materias", mode, len(sections), len(by_subject))

    if mode == "exhaustive":
        if len(by_subject) > cfg.exhaustive_warn_subjects:
            logger.warning(
                "La búsqueda exhaustiva puede ser muy lenta con %d materias; considere el modo rápido",
                len(by_subject),
            )
        result = generate_exhaustive(by_subject, preferences, constraints)
    elif mode == "partial":
        flat = [s for group in by_subject.values() for s in group]
        chosen = generate_best_effort(
            flat, preferences, constraints, rng=rng,
            small_n_threshold=cfg.small_n_threshold,
            min_attempts=cfg.min_attempts,
            max_attempts=cfg.max_attempts,
        )
        result = summarize(chosen, preferences)
    else:
        result = generate_fast(
            by_subject, preferences, constraints, rng=rng, tried=tried, max_attempts=cfg.fast_attempts,
        )

    if not result.is_empty and not conflict_free(result.schedule):
        logger.error("El mejor horario encontrado aún tiene cruces; se descarta")
        return ScoreBreakdown()
    if result.is_empty:
        logger.info("No se encontró un horario válido con los filtros actuales")
    else:
        logger.info(
            "Horario con %d secciones (puntaje=%s, pref=%d, días=%d)",
            len(result.schedule), result.aggregate_score,
            result.time_preference_score, result.campus_day_count,
        )
    return result
