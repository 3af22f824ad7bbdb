# course_scheduler/data_loader.py
import re
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd

from .model import DAY_CODES, CourseSection, MeetingPattern, ParsedSchedule, ScoreBreakdown, TBA_SCHEDULE

REQUIRED_COLUMNS = ("id", "subject", "section", "units", "days", "start", "end", "room")

_DAY_TOKEN_RE = re.compile(r"TH|SU|M|T|W|F|S")
_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})")


def parse_days(text: str) -> Tuple[str, ...]:
    """
    'M,W' / 'MW' / 'TTH' -> códigos de día. 'TBA' o vacío -> ().
    """
    clean = (text or "").upper().replace(",", " ").replace("/", " ")
    if not clean.strip() or clean.strip() == "TBA":
        return ()
    days: List[str] = []
    for chunk in clean.split():
        for token in _DAY_TOKEN_RE.findall(chunk):
            if token not in days:
                days.append(token)
    return tuple(days)


def normalize_time(text: str) -> Optional[str]:
    """'9:00' -> '09:00'. Valores no reconocidos -> None."""
    match = _TIME_RE.fullmatch((text or "").strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "si", "sí", "y")


def _as_int(value: str, default: int) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _build_schedule(rows: pd.DataFrame) -> ParsedSchedule:
    slots = []
    for r in rows.itertuples(index=False):
        days = parse_days(r.days)
        start, end = normalize_time(r.start), normalize_time(r.end)
        if not days or start is None or end is None or start >= end:
            continue
        slots.append(MeetingPattern(days=frozenset(days), start=start, end=end, room=r.room or None))
    if not slots:
        return TBA_SCHEDULE
    return ParsedSchedule(slots=tuple(slots), is_tba=False)


def load_catalog(path: str) -> List[CourseSection]:
    # Una fila por bloque de clase; filas con el mismo (id, subject, section) forman una sección.
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Faltan columnas en el catálogo: {missing}")
    df = df.apply(lambda col: col.str.strip())

    sections: List[CourseSection] = []
    for (sid, subject, section), rows in df.groupby(["id", "subject", "section"], sort=False):
        first = rows.iloc[0]
        credited = first.get("credited_units", "")
        sections.append(
            CourseSection(
                id=sid,
                subject=subject,
                section=section,
                credit_units=first["units"],
                schedule=_build_schedule(rows),
                title=first.get("title", ""),
                credited_units=credited if credited != "" else None,
                is_closed=_as_bool(first.get("is_closed", "")),
                enrolled=_as_int(first.get("enrolled", ""), 0),
                total_slots=_as_int(first.get("total_slots", ""), 0),
                available_slots=_as_int(first.get("available_slots", ""), 1),
                offering_dept=first.get("offering_dept", "") or None,
            )
        )
    return sections


def schedule_to_dataframe(result: ScoreBreakdown) -> pd.DataFrame:
    data = []
    for sec in result.schedule:
        if not sec.schedule.is_placeable:
            data.append(
                {"Materia": sec.subject, "Seccion": sec.section, "Titulo": sec.title,
                 "Dias": "TBA", "Inicio": "", "Fin": "", "Aula": ""}
            )
            continue
        for slot in sec.schedule.slots:
            data.append(
                {
                    "Materia": sec.subject,
                    "Seccion": sec.section,
                    "Titulo": sec.title,
                    "Dias": ",".join(sorted(slot.days, key=_day_order)),
                    "Inicio": slot.start or "",
                    "Fin": slot.end or "",
                    "Aula": slot.room or "",
                }
            )
    return pd.DataFrame(data, columns=["Materia", "Seccion", "Titulo", "Dias", "Inicio", "Fin", "Aula"])


def _day_order(day: str) -> int:
    return DAY_CODES.index(day) if day in DAY_CODES else len(DAY_CODES)


def export_outputs(df_schedule: pd.DataFrame, result: ScoreBreakdown, out_dir: Path, mode: str, elapsed: float):
    out_dir.mkdir(parents=True, exist_ok=True)
    df_schedule.to_csv(out_dir / "schedule.csv", index=False)
    metrics = {
        "mode": mode,
        "courses": len(result.schedule),
        "subjects": len({s.subject for s in result.schedule}),
        "aggregate_score": result.aggregate_score,
        "time_preference_score": result.time_preference_score,
        "campus_days": result.campus_day_count,
        "time_sec": elapsed,
    }
    pd.DataFrame([metrics]).to_csv(out_dir / "metrics.csv", index=False)
