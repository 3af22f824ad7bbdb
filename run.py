import argparse
import logging
import random
import time
from pathlib import Path

from course_scheduler.config import SEARCH_MODES, load_config
from course_scheduler.data_loader import export_outputs, load_catalog, schedule_to_dataframe
from course_scheduler.eligibility import filter_eligible
from course_scheduler.generation import generate_schedule
from course_scheduler.logging_setup import setup_logging
from course_scheduler.model import ScoreBreakdown

logger = logging.getLogger("run")


def print_schedule(result: ScoreBreakdown):
    print("\n" + "=" * 80)
    print("HORARIO GENERADO")
    print("=" * 80)
    for sec in result.schedule:
        if not sec.schedule.is_placeable:
            print(f"{sec.subject:<12} {sec.section:<14} TBA")
            continue
        for slot in sec.schedule.slots:
            days = ",".join(sorted(slot.days))
            print(f"{sec.subject:<12} {sec.section:<14} {days:<10} {slot.start}-{slot.end}  {slot.room or ''}")
    print("=" * 80 + "\n")


def main():
    parser = argparse.ArgumentParser(description="Generación de horarios sin cruces a partir de un catálogo")
    parser.add_argument("--config", default="config.yaml", help="Ruta al archivo de configuración")
    parser.add_argument("--catalog", default="data/catalog.csv", help="CSV con las secciones del catálogo")
    parser.add_argument("--mode", choices=SEARCH_MODES, default=None, help="Modo de búsqueda (sobrescribe la configuración)")
    parser.add_argument("--seed", type=int, default=None, help="Semilla para los modos aleatorios")
    parser.add_argument("--out", default="outputs", help="Directorio de salida")
    parser.add_argument("--log-level", default="INFO", help="Nivel de logging")
    args = parser.parse_args()

    setup_logging(args.log_level)
    cfg = load_config(args.config)
    mode = args.mode or cfg.search_mode
    seed = args.seed if args.seed is not None else cfg.seed

    print("Cargando catálogo...")
    catalog = load_catalog(args.catalog)
    eligible = filter_eligible(catalog, cfg.eligibility())
    logger.info("%d de %d secciones elegibles", len(eligible), len(catalog))

    start = time.perf_counter()
    result = generate_schedule(
        eligible,
        cfg.preferences(),
        cfg.constraints(),
        mode=mode,
        rng=random.Random(seed),
        cfg=cfg,
    )
    elapsed = time.perf_counter() - start

    if result.is_empty:
        print("No se pudo generar un horario válido con los filtros actuales.")
    else:
        print(
            f"Secciones: {len(result.schedule)} | Puntaje: {result.aggregate_score} | "
            f"Preferencia horaria: {result.time_preference_score} | Días en campus: {result.campus_day_count} | "
            f"Tiempo: {elapsed:.2f}s"
        )
        print_schedule(result)

    out_dir = Path(args.out)
    export_outputs(schedule_to_dataframe(result), result, out_dir, mode, elapsed)
    print(f"Se guardaron resultados en {out_dir / 'schedule.csv'} y {out_dir / 'metrics.csv'}")


if __name__ == "__main__":
    main()
