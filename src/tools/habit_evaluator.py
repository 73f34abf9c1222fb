"""
Monthly habit evaluation.

Reads cumulative habit numbers from the monthly habit text and rates each
habit good, warning or bad. Simple habits use thresholds either scaled by the
number of weeks in the month or fixed; the hobby score always uses fixed
thresholds. Warnings are reported with the bad habits so the monthly retro
stays two-column.
"""

import logging
import re
from typing import Optional, Tuple

from schema.retro_models import HabitEvaluation, HabitRule, HobbyRule, RetroConfig

# Configure logging
logger = logging.getLogger(__name__)

GOOD = "good"
WARNING = "warning"
BAD = "bad"

STATUS_GLYPHS = {GOOD: "✅", WARNING: "⚠️", BAD: "❌"}
STATUS_LABELS = {GOOD: "Good", WARNING: "Not great", BAD: "Bad"}

HOBBY_FIELDS = ("reading", "art", "coding", "gaming")


def classify(value: float, week_count: int, rule: HabitRule) -> str:
    """
    Rate one habit value.

    Per-week thresholds are multiplied by week_count. Absolute thresholds are
    used as-is; with operator "<=" lower values are better.
    """
    if rule.good_per_week is not None and rule.warning_per_week is not None:
        if value >= rule.good_per_week * week_count:
            return GOOD
        if value >= rule.warning_per_week * week_count:
            return WARNING
        return BAD

    if rule.operator == "<=":
        if value <= rule.good_absolute:
            return GOOD
        if value < rule.warning_absolute:
            return WARNING
        return BAD

    if value >= rule.good_absolute:
        return GOOD
    if value >= rule.warning_absolute:
        return WARNING
    return BAD


def hobby_score(reading: float, art: float, coding: float, gaming: float) -> float:
    """Reading, art and coding days count for the score; gaming days count against."""
    return reading + art + coding - gaming


def classify_hobby(score: float, rule: HobbyRule) -> str:
    # Good requires strictly exceeding the threshold, unlike the simple habits
    if score > rule.good_absolute:
        return GOOD
    if score >= rule.warning_absolute:
        return WARNING
    return BAD


def format_habit_line(status: str, description: str, detail: str, emoji: str = "") -> str:
    """Render e.g. "✅ 🛌 Good sleeping habits (7 early wake ups)"."""
    prefix = f"{STATUS_GLYPHS[status]} {emoji} " if emoji else f"{STATUS_GLYPHS[status]} "
    return f"{prefix}{STATUS_LABELS[status]} {description} ({detail})"


def evaluate_rule(
    habit_text: str, week_count: int, name: str, rule: HabitRule
) -> Optional[Tuple[str, str]]:
    """
    Evaluate one simple habit rule.

    Returns:
        Optional[Tuple[str, str]]: (status, formatted line), or None when the
        rule's pattern does not occur in the text
    """
    match = re.search(rule.pattern, habit_text)
    if not match:
        logger.debug(f"Habit {name} not found in monthly habit text")
        return None
    try:
        value = float(match.group(1))
    except (IndexError, TypeError, ValueError):
        logger.debug(f"Habit {name} pattern matched without a numeric value")
        return None

    status = classify(value, week_count, rule)
    return status, format_habit_line(status, rule.description, match.group(0).strip(), rule.emoji)


def _parse_count(match, group, field: str) -> Optional[float]:
    try:
        value = match.group(group)
        return float(value) if value is not None else 0.0
    except (IndexError, TypeError, ValueError):
        logger.debug(f"Hobby {field} pattern matched without a numeric value, skipping")
        return None


def _hobby_counts(habit_text: str, rule: HobbyRule) -> Optional[Tuple[dict, str]]:
    if rule.combined_pattern:
        match = re.search(rule.combined_pattern, habit_text)
        if match:
            counts = {field: 0.0 for field in HOBBY_FIELDS}
            for field in HOBBY_FIELDS:
                value = _parse_count(match, field, field)
                if value is not None:
                    counts[field] = value
            return counts, match.group(0).strip()

    patterns = {
        "reading": rule.reading_pattern,
        "art": rule.art_pattern,
        "coding": rule.coding_pattern,
        "gaming": rule.gaming_pattern,
    }
    counts = {field: 0.0 for field in HOBBY_FIELDS}
    details = []
    for field in HOBBY_FIELDS:
        pattern = patterns[field]
        if not pattern:
            continue
        match = re.search(pattern, habit_text)
        if not match:
            continue
        value = _parse_count(match, 1, field)
        if value is None:
            continue
        counts[field] = value
        details.append(match.group(0).strip())
    if not details:
        return None
    return counts, ", ".join(details)


def evaluate_hobby(habit_text: str, rule: HobbyRule) -> Optional[Tuple[str, str]]:
    """
    Evaluate the composite hobby score.

    Returns:
        Optional[Tuple[str, str]]: (status, formatted line), or None when none of
        the hobby counts occur in the text
    """
    found = _hobby_counts(habit_text, rule)
    if found is None:
        logger.debug("No hobby counts found in monthly habit text")
        return None
    counts, detail = found
    score = hobby_score(counts["reading"], counts["art"], counts["coding"], counts["gaming"])
    status = classify_hobby(score, rule)
    logger.debug(f"Hobby score {score} rated {status}")
    return status, format_habit_line(status, rule.description, detail, rule.emoji)


def evaluate_habits(
    habit_text: str,
    week_count: int,
    config: RetroConfig,
) -> HabitEvaluation:
    """
    Sort the month's habits into good and bad lines.

    Args:
        habit_text: Monthly habit text, e.g. "🌅 7 early wake ups, 💪 14 workouts"
        week_count: Number of weeks the month spans
        config: Retro configuration holding habit_rules and hobby_rule

    Returns:
        HabitEvaluation: Good lines and bad lines; warnings are in bad
    """
    evaluation = HabitEvaluation()
    if not habit_text or not habit_text.strip():
        return evaluation

    results = []
    for name, rule in config.habit_rules.items():
        results.append(evaluate_rule(habit_text, week_count, name, rule))
    if config.hobby_rule is not None:
        results.append(evaluate_hobby(habit_text, config.hobby_rule))

    for result in results:
        if result is None:
            continue
        status, line = result
        if status == GOOD:
            evaluation.good.append(line)
        else:
            evaluation.bad.append(line)
    return evaluation
