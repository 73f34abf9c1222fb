"""
Monthly retro aggregation.

Folds the weekly extraction results of one month into a single rollup per
section:

- TRIPS, EVENTS, ROCKS: one comma-separated line of every item
- HABITS: how many weeks each habit showed up, "Habit (3/4 weeks)"
- CAL_SUMMARY: summed events and hours per category, "No X Time" week counts
- CAL_EVENTS: summed events and hours per category, optional event details
- TASKS: summed completed (and total) counts per category, optional details

Day-of-week references are dropped from calendar event and task detail lines
since they no longer say anything at month scale.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence

from schema.retro_models import MODES, RetroConfig
from tools.extractors import DEFAULT_STATUS_GLYPHS, strip_status_glyphs
from tools.habit_evaluator import evaluate_habits
from tools.sections import split_weekly_blocks
from tools.weekly_extraction import SECTION_HEADER, extract_week, format_weekly_retro

# Configure logging
logger = logging.getLogger(__name__)

DAY_NAMES = (
    r"(?:Sunday|Monday|Tuesday|Wednesday|Thursday|Friday|Saturday"
    r"|Sun|Mon|Tue|Wed|Thu|Fri|Sat)"
)
DAY_RANGE_RE = re.compile(rf"\s*\b{DAY_NAMES}\s*-\s*{DAY_NAMES}\b", re.IGNORECASE)
ON_DAY_RE = re.compile(rf"\s+on\s+{DAY_NAMES}\b", re.IGNORECASE)
DASH_DAY_RE = re.compile(rf"\s*-\s*{DAY_NAMES}(?=\s|$)", re.IGNORECASE)

CAL_STATS_RE = re.compile(
    r"^(?P<category>.+?)\s*\((?P<events>\d+)\s+events?,\s*(?P<hours>\d+(?:\.\d+)?)\s+hours?\)\s*:?\s*$"
)
TASK_HEADER_RE = re.compile(
    r"^(?P<category>.+?)\s*\((?P<done>\d+)(?:/(?P<total>\d+))?\)\s*:?\s*$"
)
NO_ITEM_RE = re.compile(r"^No .+ Time$")

MONTHLY_GOOD_HEADER = "WHAT WENT WELL"
MONTHLY_BAD_HEADER = "WHAT DIDN'T GO WELL"


def remove_days_of_week(text: str) -> str:
    """
    Drop weekday references such as " on Mon", "Mon - Tue" or " - Tue".

    "Dinner with Sam on Fri" -> "Dinner with Sam"
    """
    cleaned = DAY_RANGE_RE.sub("", text)
    cleaned = ON_DAY_RE.sub("", cleaned)
    cleaned = DASH_DAY_RE.sub("", cleaned)
    return cleaned.strip()


def extract_habit_core(item: str, glyphs: Sequence[str] = DEFAULT_STATUS_GLYPHS) -> str:
    """
    Grouping key for a habit line: the text before the first parenthesis,
    without a leading status glyph.

    "✅ Good workout habits (3 workouts)" -> "Good workout habits"
    """
    core = strip_status_glyphs(item, glyphs)
    return core.split("(", 1)[0].strip()


def _flatten(weekly_lists: Sequence[Sequence[str]]) -> List[str]:
    return [
        item
        for week in weekly_lists
        if week
        for item in week
        if isinstance(item, str) and item
    ]


def _split_details(text: str) -> List[str]:
    return [
        remove_days_of_week(part.strip())
        for part in text.split(",")
        if part.strip() and remove_days_of_week(part.strip())
    ]


def aggregate_concatenation(weekly_lists: Sequence[Sequence[str]]) -> List[str]:
    """
    Join the month's items into one comma-separated line, in week order.

    Items are kept as written. Only entries that are empty after trimming
    are dropped, so a single week joins to exactly its own list.

    Returns:
        List[str]: A single-element list, or [] when nothing remains
    """
    items = [item.strip() for item in _flatten(weekly_lists) if item.strip()]
    if not items:
        return []
    return [", ".join(items)]


def aggregate_habits(
    weekly_lists: Sequence[Sequence[str]],
    glyphs: Sequence[str] = DEFAULT_STATUS_GLYPHS,
) -> List[str]:
    """Count in how many weeks each habit appears."""
    total_weeks = len(weekly_lists)
    counts: Dict[str, int] = {}
    for week in weekly_lists:
        seen = set()
        for item in week or []:
            if not isinstance(item, str):
                continue
            core = extract_habit_core(item, glyphs)
            if core and core not in seen:
                seen.add(core)
                counts[core] = counts.get(core, 0) + 1
    return [f"{habit} ({count}/{total_weeks} weeks)" for habit, count in counts.items()]


def aggregate_cal_summary(
    weekly_lists: Sequence[Sequence[str]],
    glyphs: Sequence[str] = DEFAULT_STATUS_GLYPHS,
) -> List[str]:
    """
    Sum events and hours per calendar category across the month.

    "Workout Cal (2 events, 1.0 hours)" + "Workout Cal (3 events, 2.5 hours)"
    -> "Workout Cal (5 events, 3.5 hours total)"
    """
    total_weeks = len(weekly_lists)
    passthrough: Dict[str, None] = {}
    totals: Dict[str, Dict[str, float]] = {}
    no_item_counts: Dict[str, int] = {}

    for item in _flatten(weekly_lists):
        cleaned = strip_status_glyphs(item, glyphs)
        stats = CAL_STATS_RE.match(cleaned)
        if stats:
            category = stats.group("category").strip()
            category_totals = totals.setdefault(category, {"events": 0, "hours": 0.0})
            category_totals["events"] += int(stats.group("events"))
            category_totals["hours"] += float(stats.group("hours"))
        elif NO_ITEM_RE.match(cleaned):
            no_item_counts[cleaned] = no_item_counts.get(cleaned, 0) + 1
        else:
            passthrough.setdefault(item.strip(), None)

    aggregated = list(passthrough)
    for category, category_totals in totals.items():
        aggregated.append(
            f"{category} ({int(category_totals['events'])} events, "
            f"{category_totals['hours']:.1f} hours total)"
        )
    for no_item, count in no_item_counts.items():
        aggregated.append(f"{no_item} ({count}/{total_weeks} weeks)")
    return aggregated


def aggregate_cal_events(
    weekly_lists: Sequence[Sequence[str]],
    config: Optional[RetroConfig] = None,
) -> List[str]:
    """
    Sum events and hours per calendar category, listing the events behind a
    category when its cal_event_details flag is on.
    """
    glyphs = config.status_glyphs if config is not None else DEFAULT_STATUS_GLYPHS
    show_details = config.cal_event_details if config is not None else {}
    categories: Dict[str, dict] = {}

    for item in _flatten(weekly_lists):
        header, _, details = item.partition("\n")
        stats = CAL_STATS_RE.match(strip_status_glyphs(header, glyphs))
        if not stats:
            logger.debug(f"Skipping calendar block with unparsable header: {header!r}")
            continue
        category = stats.group("category").strip()
        data = categories.setdefault(category, {"events": 0, "hours": 0.0, "details": {}})
        data["events"] += int(stats.group("events"))
        data["hours"] += float(stats.group("hours"))
        for detail in _split_details(details):
            data["details"].setdefault(detail, None)

    aggregated = []
    for category, data in categories.items():
        line = f"{category} ({data['events']} events, {data['hours']:.1f} hours total)"
        if show_details.get(category, False) and data["details"]:
            line += ":\n" + ", ".join(data["details"])
        aggregated.append(line)
    return aggregated


def aggregate_tasks(
    weekly_lists: Sequence[Sequence[str]],
    config: Optional[RetroConfig] = None,
) -> List[str]:
    """
    Sum completed task counts per category.

    "✅ Home Tasks (3/4)" in two weeks -> "Home Tasks: 6/8 total". Categories
    keep the order they were first seen in. Weeks that report a bare count
    leave the total alone; the total is shown once any week reports one.
    """
    glyphs = config.status_glyphs if config is not None else DEFAULT_STATUS_GLYPHS
    show_details = config.task_details if config is not None else {}
    categories: Dict[str, dict] = {}

    for item in _flatten(weekly_lists):
        header, _, details = item.partition("\n")
        match = TASK_HEADER_RE.match(strip_status_glyphs(header, glyphs))
        if not match:
            logger.debug(f"Skipping task block with unparsable header: {header!r}")
            continue
        category = match.group("category").strip()
        done = int(match.group("done"))
        total = match.group("total")
        data = categories.setdefault(
            category, {"done": 0, "total": 0, "has_total": False, "details": {}}
        )
        data["done"] += done
        if total is not None:
            data["total"] += int(total)
            data["has_total"] = True
        if show_details.get(category, False):
            for detail in _split_details(details):
                data["details"].setdefault(detail, None)

    aggregated = []
    for category, data in categories.items():
        count = f"{data['done']}/{data['total']}" if data["has_total"] else str(data["done"])
        line = f"{category}: {count} total"
        if data["details"]:
            line += "\n" + ", ".join(data["details"])
        aggregated.append(line)
    return aggregated


def aggregate_default(weekly_lists: Sequence[Sequence[str]]) -> List[str]:
    items = _flatten(weekly_lists)
    return ["\n".join(items)] if items else []


def aggregate(
    section_name: str,
    weekly_lists: Sequence[Sequence[str]],
    config: Optional[RetroConfig] = None,
) -> List[str]:
    """
    Roll up one section's weekly item lists into the monthly items.

    Args:
        section_name: Section key, e.g. "CAL_SUMMARY"
        weekly_lists: One item list per week of the month
        config: Retro configuration for detail flags and status glyphs

    Returns:
        List[str]: Monthly items for the section, [] when there are no weeks
    """
    if not weekly_lists:
        return []

    glyphs = config.status_glyphs if config is not None else DEFAULT_STATUS_GLYPHS
    name = section_name.upper().replace(" ", "_")
    if name in ("TRIPS", "EVENTS", "ROCKS"):
        return aggregate_concatenation(weekly_lists)
    if name == "HABITS":
        return aggregate_habits(weekly_lists, glyphs)
    if name == "CAL_SUMMARY":
        return aggregate_cal_summary(weekly_lists, glyphs)
    if name == "CAL_EVENTS":
        return aggregate_cal_events(weekly_lists, config)
    if name == "TASKS":
        return aggregate_tasks(weekly_lists, config)
    return aggregate_default(weekly_lists)


def build_monthly_retro(
    monthly_task_text: str,
    monthly_cal_text: str,
    config: RetroConfig,
    mode: str,
    monthly_habit_text: Optional[str] = None,
    week_count: Optional[int] = None,
    task_label: str = "Tasks",
    cal_label: str = "Cal",
) -> Dict[str, List[str]]:
    """
    Build the monthly rollup for one mode.

    The monthly task and calendar texts are split into weeks on their
    "+++ Week N Recap ... +++" markers; text without markers counts as one
    week. Each week goes through extract_week and every section is then
    aggregated. When monthly habit text is given, HABITS comes from the habit
    evaluator instead of weekly habit counts.

    Returns:
        Dict[str, List[str]]: Monthly items per section, in section order
    """
    if mode not in MODES:
        logger.warning(f"Unknown retro mode {mode!r}, nothing aggregated")
        return {}

    task_weeks = split_weekly_blocks(monthly_task_text or "", task_label)
    cal_weeks = split_weekly_blocks(monthly_cal_text or "", cal_label)
    if not task_weeks and monthly_task_text and monthly_task_text.strip():
        task_weeks = [monthly_task_text.strip()]
    if not cal_weeks and monthly_cal_text and monthly_cal_text.strip():
        cal_weeks = [monthly_cal_text.strip()]

    weeks_found = max(len(task_weeks), len(cal_weeks))
    logger.info(f"Aggregating {weeks_found} weeks for {mode} monthly retro")

    weekly_results = []
    for index in range(weeks_found):
        task_text = task_weeks[index] if index < len(task_weeks) else ""
        cal_text = cal_weeks[index] if index < len(cal_weeks) else ""
        weekly_results.append(extract_week(task_text, cal_text, mode, config))

    habit_weeks = week_count if week_count is not None else weeks_found
    monthly: Dict[str, List[str]] = {}
    for section_name in config.section_order:
        section = config.sections.get(section_name)
        if section is None or not section.includes(mode):
            continue
        if config.criterion_for(section_name, mode) is None:
            continue
        if section_name.upper() == "HABITS" and monthly_habit_text and habit_weeks:
            evaluation = evaluate_habits(monthly_habit_text, habit_weeks, config)
            monthly[section_name] = evaluation.for_mode(mode)
            continue
        weekly_lists = [week.get(section_name, []) for week in weekly_results]
        monthly[section_name] = aggregate(section_name, weekly_lists, config)
    return monthly


def format_monthly_retro(
    good: Dict[str, List[str]], bad: Dict[str, List[str]], config: RetroConfig
) -> str:
    """
    Combine the good and bad monthly rollups into one text.

    Returns:
        str: "===== WHAT WENT WELL =====" block followed by the
        "===== WHAT DIDN'T GO WELL =====" block; either is left out when empty
    """
    parts = []
    good_text = format_weekly_retro(good, config, "good")
    bad_text = format_weekly_retro(bad, config, "bad")
    if good_text:
        parts.append(f"{SECTION_HEADER.format(title=MONTHLY_GOOD_HEADER)}\n{good_text}")
    if bad_text:
        parts.append(f"{SECTION_HEADER.format(title=MONTHLY_BAD_HEADER)}\n{bad_text}")
    return "\n\n".join(parts)
