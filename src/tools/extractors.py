"""
Section extractors for weekly retro reports.

Each extractor takes the body of one located section, the criterion for the
current mode and the retro config, and returns the matching items rendered as
strings in the order they appear in the report. Extractors never raise on odd
input: a line that cannot be parsed is dropped and the rest of the section is
still processed.
"""

import logging
import re
from typing import List, Optional, Sequence, Tuple

from schema.retro_models import RetroConfig
from tools.criteria import matches

# Configure logging
logger = logging.getLogger(__name__)

EVENT_SEPARATOR = " - "
DEFAULT_STATUS_GLYPHS = ("✅", "❌", "☑️", "⚠️")
VARIATION_SELECTOR = "\ufe0f"

PLACEHOLDER_RE = re.compile(r"^No \w+(?: \w+)? this week\.?$|^No (?:trips|events)\b", re.IGNORECASE)
TRAILING_PAREN_RE = re.compile(r"\s*\([^)]*\)\s*$")
CAL_STATS_RE = re.compile(
    r"^(?P<category>.+?)\s*\((?P<events>\d+)\s+events?,\s*(?P<hours>\d+(?:\.\d+)?)\s+hours?\)\s*:?\s*$"
)
TASK_COUNT_RE = re.compile(r"^(?P<category>.+?)\s*\((?P<count>\d+/\d+|\d+)\)")
HEADER_STATS_RE = re.compile(r"^(?P<category>.+?)\s*\((?P<stats>[^)]+)\)")


# Rock status phrases and the glyphs that imply them when the phrase is garbled
ROCK_WENT_WELL = "went well"
ROCK_MADE_PROGRESS = "made progress"
ROCK_WENT_BAD = "went bad"
ROCK_NOT_SO_WELL = "didn't go so well"

ROCK_STATUS_GLYPHS = {
    "✅": ROCK_WENT_WELL,
    "👾": ROCK_MADE_PROGRESS,
    "🥊": ROCK_WENT_BAD,
    "🚧": ROCK_NOT_SO_WELL,
}

ROCK_LINE_RE = re.compile(
    r"^(?P<glyph>[^\w\s(]+)?\s*"
    r"(?P<status>went well|made progress|went bad|didn['’]t go so well)"
    r"\s*[-–—:]\s*"
    r"(?P<title>.*?)"
    r"(?:\s*\((?P<note>[^)]*)\))?\s*$",
    re.IGNORECASE,
)
ROCK_PHRASE_RE = re.compile(
    r"went well|made progress|went bad|didn['’]t go so well", re.IGNORECASE
)


def _status_glyphs(config: Optional[RetroConfig]) -> Tuple[str, ...]:
    return tuple(config.status_glyphs) if config is not None else DEFAULT_STATUS_GLYPHS


def _glyph_variants(glyphs: Sequence[str]) -> List[str]:
    # Reports are inconsistent about the emoji variation selector
    variants = set()
    for glyph in glyphs:
        if glyph:
            variants.add(glyph)
            bare = glyph.replace(VARIATION_SELECTOR, "")
            if bare:
                variants.add(bare)
    return sorted(variants, key=len, reverse=True)


def strip_status_glyphs(text: str, glyphs: Sequence[str] = DEFAULT_STATUS_GLYPHS) -> str:
    """
    Remove leading status glyphs, keeping any other emoji in place.

    "✅ 🛌 Good sleeping habits" -> "🛌 Good sleeping habits"
    """
    cleaned = text.strip()
    variants = _glyph_variants(glyphs)
    stripped = True
    while stripped and cleaned:
        stripped = False
        for glyph in variants:
            if cleaned.startswith(glyph):
                cleaned = cleaned[len(glyph):].lstrip(VARIATION_SELECTOR).strip()
                stripped = True
                break
    return cleaned


def _leading_status_glyph(text: str, glyphs: Sequence[str]) -> Optional[str]:
    stripped = text.strip()
    for glyph in sorted((g for g in glyphs if g), key=len, reverse=True):
        if stripped.startswith(glyph) or stripped.startswith(glyph.replace(VARIATION_SELECTOR, "")):
            return glyph
    return None


def _is_bullet(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith("•") or stripped.startswith(("- ", "* "))


def _bullet_text(line: str) -> str:
    return line.strip()[1:].strip()


def _report_lines(section_text: str) -> List[str]:
    return [
        line.strip()
        for line in section_text.splitlines()
        if line.strip() and "=====" not in line
    ]


# Trips and events


def extract_events(
    section_text: str,
    criterion,
    config: Optional[RetroConfig] = None,
    preserve_glyphs: Sequence[str] = (),
) -> List[str]:
    """
    Extract trip or event descriptions.

    Lines look like "🎉 Party - Alex's birthday on Sat". The criterion is tested
    against the whole line; the output keeps only the description after the
    first " - ". Glyphs in `preserve_glyphs` found in the event type are kept in
    front of the description.
    """
    if not section_text:
        return []

    glyphs = _status_glyphs(config)
    items = []
    for line in _report_lines(section_text):
        if PLACEHOLDER_RE.match(line):
            continue
        if not matches(line, criterion):
            continue

        if EVENT_SEPARATOR in line:
            event_type, description = line.split(EVENT_SEPARATOR, 1)
        else:
            event_type, description = "", line
        description = strip_status_glyphs(description, glyphs)
        if not description:
            logger.debug(f"Dropping event line with empty description: {line!r}")
            continue

        kept = [glyph for glyph in preserve_glyphs if glyph and glyph in event_type]
        if kept:
            description = f"{' '.join(kept)} {description}"
        items.append(description)
    return items


def extract_trips(
    section_text: str, criterion, config: Optional[RetroConfig] = None
) -> List[str]:
    """Trips use the same "Type - Description" lines as events."""
    return extract_events(section_text, criterion, config)


# Rocks


def _render_rock(status: str, title: str) -> str:
    status = status.lower().replace("’", "'")
    if status == ROCK_MADE_PROGRESS:
        return f"Made progress on {title}"
    if status == ROCK_WENT_BAD:
        return f"{title} went bad"
    if status == ROCK_NOT_SO_WELL:
        return f"{title} didn't go so well"
    return title


def parse_rock_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Structured parse of a rock line.

    Returns:
        Optional[Tuple[str, str]]: (status phrase, title), or None if the line
        does not follow "<glyph> <Status> - <Title> (<note>)"
    """
    match = ROCK_LINE_RE.match(line.strip())
    if not match:
        return None
    return match.group("status"), match.group("title").strip()


def recover_rock_line(line: str) -> Tuple[str, str]:
    """
    Heuristic parse for rock lines the structured pattern rejects.

    The status comes from a status phrase anywhere in the line, then from a
    leading status glyph, and defaults to "went well". The title is what is
    left after removing glyphs, the phrase, dash separators and a trailing
    parenthetical note.
    """
    text = line.strip()
    lowered = text.lower().replace("’", "'")

    status = None
    for phrase in (ROCK_MADE_PROGRESS, ROCK_WENT_BAD, ROCK_NOT_SO_WELL, ROCK_WENT_WELL):
        if phrase in lowered:
            status = phrase
            break
    if status is None:
        for glyph, glyph_status in ROCK_STATUS_GLYPHS.items():
            if glyph in text:
                status = glyph_status
                break
    if status is None:
        status = ROCK_WENT_WELL

    title = text
    for glyph in ROCK_STATUS_GLYPHS:
        title = title.replace(glyph, " ")
    title = strip_status_glyphs(title)
    title = ROCK_PHRASE_RE.sub(" ", title)
    title = TRAILING_PAREN_RE.sub("", title)
    title = re.sub(r"\s+", " ", title).strip(" -–—:")
    return status, title.strip()


def extract_rocks(
    section_text: str, criterion, config: Optional[RetroConfig] = None
) -> List[str]:
    """
    Extract rocks as short phrases.

    "✅ Went well - Ship onboarding flow (launched Monday)" -> "Ship onboarding flow"
    "👾 Made progress - Learn Rust" -> "Made progress on Learn Rust"
    """
    if not section_text:
        return []

    rocks = []
    for line in _report_lines(section_text):
        if not matches(line, criterion):
            continue

        parsed = parse_rock_line(line)
        if parsed is None:
            logger.debug(f"Rock line did not parse cleanly, recovering: {line!r}")
            parsed = recover_rock_line(line)
        status, title = parsed

        if not title:
            logger.debug(f"Dropping rock line with empty title: {line!r}")
            continue
        rocks.append(_render_rock(status, title))
    return rocks


# Habits


def extract_habits(
    section_text: str, criterion, config: Optional[RetroConfig] = None
) -> List[str]:
    """Keep whole habit lines, removing only the leading status glyph."""
    if not section_text:
        return []

    glyphs = _status_glyphs(config)
    habits = []
    for line in _report_lines(section_text):
        if not matches(line, criterion):
            continue
        cleaned = strip_status_glyphs(line, glyphs)
        if cleaned:
            habits.append(cleaned)
    return habits


# Calendar summary


def extract_cal_summary(
    section_text: str, criterion, config: Optional[RetroConfig] = None
) -> List[str]:
    """
    Extract calendar summary lines such as "✅ Workout Cal (2 events, 1.0 hours):".

    A zero-event, zero-hour line for a category with a configured replacement
    is rendered as that replacement ("No Reading Time").
    """
    if not section_text:
        return []

    glyphs = _status_glyphs(config)
    replacements = config.cal_summary_zero_item_replacements if config is not None else {}
    items = []
    for line in _report_lines(section_text):
        if _is_bullet(line) or PLACEHOLDER_RE.match(line):
            continue
        if not matches(line, criterion):
            continue

        cleaned = strip_status_glyphs(line, glyphs)
        stats = CAL_STATS_RE.match(cleaned)
        if stats:
            category = stats.group("category").strip()
            zero = int(stats.group("events")) == 0 and float(stats.group("hours")) == 0
            if zero and category in replacements:
                items.append(replacements[category])
                continue
        cleaned = cleaned.rstrip(":").strip()
        if cleaned:
            items.append(cleaned)
    return items


# Calendar events and tasks share the header/bullet layout


def _is_category_header(line: str, glyphs: Sequence[str]) -> bool:
    return "(" in line and any(glyph in line for glyph in glyphs)


def extract_cal_events(
    section_text: str, criterion, config: Optional[RetroConfig] = None
) -> List[str]:
    """
    Extract calendar categories with their events.

    A category header ("✅ Workout Events (3 events, 2.5 hours):") starts a
    group, following bullet lines are its events. A group is emitted as
    "<header>:\\n<event>, <event>" only if the header matches the criterion and
    at least one event was listed.
    """
    if not section_text:
        return []

    glyphs = _status_glyphs(config)
    mappings = config.category_mappings if config is not None else {}
    output = []
    current_header = None
    current_events: List[str] = []

    def flush():
        if current_header and current_events and matches(current_header, criterion):
            output.append(f"{current_header}:\n{', '.join(current_events)}")

    for raw_line in section_text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if _is_category_header(line, glyphs) and not _is_bullet(line):
            flush()
            current_events = []
            glyph = _leading_status_glyph(line, glyphs)
            match = HEADER_STATS_RE.match(strip_status_glyphs(line, glyphs))
            if glyph is None or not match:
                logger.debug(f"Skipping malformed calendar header: {line!r}")
                current_header = None
                continue
            category = match.group("category").strip()
            category = mappings.get(category, category)
            current_header = f"{glyph} {category} ({match.group('stats')})"
        elif _is_bullet(line) and current_header:
            event = TRAILING_PAREN_RE.sub("", _bullet_text(line)).strip()
            if event:
                current_events.append(event)

    flush()
    return output


def _task_visible(task: str, config: Optional[RetroConfig]) -> bool:
    if config is None:
        return True
    if config.tasks_show_item_patterns and not any(
        pattern in task for pattern in config.tasks_show_item_patterns
    ):
        return False
    return not any(pattern in task for pattern in config.tasks_hide_item_patterns)


def extract_tasks(
    section_text: str, criterion, config: Optional[RetroConfig] = None
) -> List[str]:
    """
    Extract completed task categories with their tasks.

    Headers look like "✅ Personal Tasks (5)" or "✅ Home Tasks (3/4)". Output
    blocks are "<header>\\n<task>, <task>".
    """
    if not section_text:
        return []

    glyphs = _status_glyphs(config)
    output = []
    current_header = None
    current_tasks: List[str] = []

    def flush():
        if current_header and current_tasks:
            output.append(f"{current_header}\n{', '.join(current_tasks)}")

    for raw_line in section_text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if _is_category_header(line, glyphs) and not _is_bullet(line):
            flush()
            current_tasks = []
            current_header = None
            if not matches(line, criterion):
                continue
            glyph = _leading_status_glyph(line, glyphs)
            match = TASK_COUNT_RE.match(strip_status_glyphs(line, glyphs))
            if glyph is None or not match:
                logger.debug(f"Skipping malformed task header: {line!r}")
                continue
            current_header = f"{glyph} {match.group('category').strip()} ({match.group('count')})"
        elif _is_bullet(line) and current_header:
            task = _bullet_text(line)
            if task and _task_visible(task, config):
                current_tasks.append(task)

    flush()
    return output
