import logging
import random
import tempfile
import unittest
from pathlib import Path

from course_scheduler.config import SchedulerConfig, load_config
from course_scheduler.data_loader import load_catalog, normalize_time, parse_days, schedule_to_dataframe
from course_scheduler.eligibility import (
    EligibilityFilter,
    combination_key,
    filter_eligible,
    group_by_subject,
    schedule_key,
    section_type_suffix,
)
from course_scheduler.errors import InvalidParameterError
from course_scheduler.generation import generate_schedule
from course_scheduler.logging_setup import setup_logging
from course_scheduler.model import Constraints, CourseSection, MeetingPattern, ParsedSchedule, Preferences, TimeRange, TBA_SCHEDULE

CATALOG_CSV = """id,subject,section,title,units,days,start,end,room,is_closed,available_slots
1001,IT 111,BSIT-1A-AP3,Intro,3,MW,7:30,09:00,NGE 101,false,10
1002,IT 111,BSIT-1B-AP4,Intro,3,TTH,07:30,09:00,NGE 102,true,4
2001,IT 112,BSIT-1A-AP3,Prog 1,3,M,08:00,09:30,NGE 201,false,8
2001,IT 112,BSIT-1A-AP3,Prog 1,3,W,10:00,13:00,LAB 1,false,8
4002,PE 1,BSIT-1B-AP3,Fitness,2,TBA,,,,false,0
"""


def make_section(sid, subject, slots, section="BSIT-1A-AP3", **kwargs):
    patterns = tuple(
        MeetingPattern(days=frozenset(days), start=start, end=end, room="R1")
        for days, start, end in slots
    )
    schedule = ParsedSchedule(slots=patterns) if patterns else TBA_SCHEDULE
    return CourseSection(id=sid, subject=subject, section=section, credit_units=3, schedule=schedule, **kwargs)


class ConfigTests(unittest.TestCase):
    def test_defaults(self):
        cfg = SchedulerConfig()
        self.assertEqual(cfg.small_n_threshold, 12)
        self.assertEqual(cfg.constraints(), Constraints(None, None))
        self.assertEqual(cfg.preferences().time_of_day_rank, ("morning", "afternoon", "evening", "any"))

    def test_from_dict_ignores_unknown_keys(self):
        cfg = SchedulerConfig.from_dict({"max_units": "8", "max_gap_hours": "", "colour": "red"})
        self.assertEqual(cfg.constraints(), Constraints(max_units=8.0, max_gap_hours=None))

    def test_invalid_values_fail_fast(self):
        with self.assertRaises(InvalidParameterError):
            SchedulerConfig(small_n_threshold=-1)
        with self.assertRaises(InvalidParameterError):
            SchedulerConfig(max_units=-2)
        with self.assertRaises(InvalidParameterError):
            SchedulerConfig(search_mode="genetic")
        with self.assertRaises(InvalidParameterError):
            SchedulerConfig(time_of_day_rank=["night"])
        with self.assertRaises(InvalidParameterError):
            SchedulerConfig(min_attempts=600)

    def test_load_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text(
                "max_units: 21\nminimize_campus_days: true\nsearch_mode: exhaustive\n"
                "excluded_days: [S, SU]\nexcluded_time_ranges:\n  - {start: '12:00', end: '13:00'}\n",
                encoding="utf-8",
            )
            cfg = load_config(str(path))
            self.assertEqual(cfg.search_mode, "exhaustive")
            self.assertTrue(cfg.preferences().minimize_campus_days)
            flt = cfg.eligibility()
            self.assertEqual(flt.excluded_days, frozenset({"S", "SU"}))
            self.assertEqual(flt.excluded_time_ranges, (TimeRange("12:00", "13:00"),))
            self.assertEqual(load_config(str(Path(tmp) / "missing.yaml")), SchedulerConfig())

    def test_unquoted_excluded_time_range(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text("excluded_time_ranges:\n  - {start: 12:00, end: 13:00}\n", encoding="utf-8")
            cfg = load_config(str(path))
        flt = cfg.eligibility()
        self.assertEqual(flt.excluded_time_ranges, (TimeRange("12:00", "13:00"),))
        monday_noon = make_section("m", "A", [(("M",), "12:00", "13:00")])
        self.assertEqual(filter_eligible([monday_noon], flt), [])

    def test_malformed_excluded_time_ranges(self):
        with self.assertRaises(InvalidParameterError):
            SchedulerConfig(excluded_time_ranges=[{"start": "12:00"}])
        with self.assertRaises(InvalidParameterError):
            SchedulerConfig(excluded_time_ranges=[{"start": "noon", "end": "13:00"}])
        with self.assertRaises(InvalidParameterError):
            SchedulerConfig(excluded_time_ranges=[{"start": "13:00", "end": "12:00"}])
        cfg = SchedulerConfig(excluded_time_ranges=[{"start": 450, "end": "09:00"}])
        self.assertEqual(cfg.excluded_time_ranges, [{"start": "07:30", "end": "09:00"}])


class EligibilityTests(unittest.TestCase):
    def setUp(self):
        self.open_mw = make_section("1", "A", [(("M", "W"), "08:00", "09:00")])
        self.closed = make_section("2", "A", [(("T",), "08:00", "09:00")], is_closed=True)
        self.full = make_section("3", "B", [(("F",), "08:00", "09:00")], available_slots=0)
        self.noon = make_section("4", "B", [(("T",), "12:00", "13:30")], section="BSIT-1B-AP4")
        self.tba = make_section("5", "C", [])

    def test_status_filter(self):
        sections = [self.open_mw, self.closed]
        self.assertEqual(filter_eligible(sections, EligibilityFilter(status="open")), [self.open_mw])
        self.assertEqual(filter_eligible(sections, EligibilityFilter(status="closed")), [self.closed])
        self.assertEqual(filter_eligible(sections, EligibilityFilter()), sections)

    def test_no_seats_left(self):
        self.assertEqual(filter_eligible([self.full], EligibilityFilter()), [])

    def test_day_and_time_exclusions_keep_tba(self):
        flt = EligibilityFilter(excluded_days=frozenset({"W"}), excluded_time_ranges=(TimeRange("11:00", "12:30"),))
        self.assertEqual(filter_eligible([self.open_mw, self.noon, self.tba], flt), [self.tba])

    def test_section_types(self):
        self.assertEqual(section_type_suffix("BSIT-1B-AP4"), "AP4")
        self.assertIsNone(section_type_suffix("BSIT-1B"))
        flt = EligibilityFilter(section_types=("AP4",))
        self.assertEqual(filter_eligible([self.open_mw, self.noon], flt), [self.noon])

    def test_unknown_status(self):
        with self.assertRaises(InvalidParameterError):
            EligibilityFilter(status="maybe")

    def test_grouping_and_keys(self):
        grouped = group_by_subject([self.noon, self.open_mw, self.full, self.closed])
        self.assertEqual(list(grouped), ["B", "A"])
        self.assertEqual(grouped["A"], [self.open_mw, self.closed])
        self.assertEqual(combination_key([self.noon, self.open_mw]), "1,4")
        self.assertEqual(schedule_key(self.open_mw), "1-A-BSIT-1A-AP3")
        self.assertEqual(schedule_key(self.noon), "4-B-BSIT-1B-AP4")


class DataLoaderTests(unittest.TestCase):
    def test_parse_helpers(self):
        self.assertEqual(parse_days("TTH"), ("T", "TH"))
        self.assertEqual(parse_days("M,W,F"), ("M", "W", "F"))
        self.assertEqual(parse_days("TBA"), ())
        self.assertEqual(normalize_time("7:30"), "07:30")
        self.assertIsNone(normalize_time("25:00"))
        self.assertIsNone(normalize_time(""))
        self.assertIsNone(normalize_time("9:00x"))

    def test_load_catalog(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "catalog.csv"
            path.write_text(CATALOG_CSV, encoding="utf-8")
            catalog = load_catalog(str(path))

        self.assertEqual([s.id for s in catalog], ["1001", "1002", "2001", "4002"])
        prog = catalog[2]
        self.assertEqual(len(prog.schedule.slots), 2)
        self.assertEqual(prog.schedule.slots[1].days, frozenset({"W"}))
        self.assertEqual(catalog[0].schedule.slots[0].start, "07:30")
        self.assertTrue(catalog[1].is_closed)
        self.assertTrue(catalog[3].schedule.is_tba)
        self.assertEqual(catalog[3].available_slots, 0)

        df = schedule_to_dataframe(generate_schedule(catalog[:3], Preferences(), Constraints(), mode="exhaustive"))
        self.assertEqual(list(df["Materia"]), ["IT 111", "IT 112", "IT 112"])

    def test_missing_columns(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.csv"
            path.write_text("id,subject\n1,A\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_catalog(str(path))


class GenerationTests(unittest.TestCase):
    def setUp(self):
        self.sections = [
            make_section("a1", "A", [(("M",), "08:00", "09:00")]),
            make_section("a2", "A", [(("T",), "08:00", "09:00")]),
            make_section("b1", "B", [(("M",), "08:30", "09:30")]),
        ]

    def test_modes(self):
        exhaustive = generate_schedule(self.sections, Preferences(), Constraints(), mode="exhaustive")
        self.assertEqual([s.id for s in exhaustive.schedule], ["a2", "b1"])
        self.assertEqual(exhaustive.aggregate_score, 206)

        partial = generate_schedule(self.sections, Preferences(), Constraints(), mode="partial")
        self.assertEqual([s.id for s in partial.schedule], ["a2", "b1"])
        self.assertEqual(partial.aggregate_score, 206)

        fast = generate_schedule(self.sections, Preferences(), Constraints(), mode="fast", rng=random.Random(9))
        self.assertEqual(len(fast.schedule), 2)

    def test_exhaustive_empty_when_infeasible(self):
        res = generate_schedule(self.sections[:1] + self.sections[2:], Preferences(), Constraints(), mode="exhaustive")
        self.assertTrue(res.is_empty)

    def test_unknown_mode(self):
        with self.assertRaises(InvalidParameterError):
            generate_schedule(self.sections, Preferences(), Constraints(), mode="genetic")

    def test_warns_on_large_exhaustive_search(self):
        cfg = SchedulerConfig(exhaustive_warn_subjects=1)
        with self.assertLogs("course_scheduler.generation", level="WARNING"):
            generate_schedule(self.sections, Preferences(), Constraints(), mode="exhaustive", cfg=cfg)

    def test_setup_logging_is_idempotent(self):
        root = logging.getLogger()
        setup_logging("DEBUG")
        count = len(root.handlers)
        setup_logging("INFO")
        self.assertEqual(len(root.handlers), count)


if __name__ == "__main__":
    unittest.main()
