"""
Weekly retro extraction.

Runs every configured section extractor over one week's task and calendar
reports for a mode ("good" or "bad") and renders the result as the
"What went well" / "What didn't go so well" text.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from schema.retro_models import MODES, RetroConfig, SectionConfig
from tools import extractors
from tools.sections import locate

# Configure logging
logger = logging.getLogger(__name__)

SECTION_HEADER = "===== {title} ====="

EXTRACTORS: Dict[str, Callable] = {
    "TRIPS": extractors.extract_trips,
    "EVENTS": extractors.extract_events,
    "ROCKS": extractors.extract_rocks,
    "HABITS": extractors.extract_habits,
    "CAL_SUMMARY": extractors.extract_cal_summary,
    "CAL_EVENTS": extractors.extract_cal_events,
    "TASKS": extractors.extract_tasks,
}


def _section_text(task_text: str, cal_text: str, section: SectionConfig) -> str:
    blob = cal_text if section.source == "cal" else task_text
    text = locate(blob or "", section.header_name)
    if not text and section.fallback_to_full_report:
        return (blob or "").strip()
    return text


def extract_section_items(
    task_text: str,
    cal_text: str,
    section_name: str,
    mode: str,
    config: RetroConfig,
) -> List[str]:
    """
    Extract one section's items for a mode.

    Returns an empty list when the section, its criterion or its extractor is
    not configured.
    """
    section = config.sections.get(section_name)
    if section is None:
        logger.warning(f"Section {section_name} has no configuration, skipping")
        return []

    criterion = config.criterion_for(section_name, mode)
    if criterion is None:
        logger.debug(f"No {mode} criterion for section {section_name}, skipping")
        return []

    extractor = EXTRACTORS.get(section_name.upper())
    if extractor is None:
        logger.warning(f"No extractor registered for section {section_name}")
        return []

    text = _section_text(task_text, cal_text, section)
    if section_name.upper() == "EVENTS":
        return extractor(
            text, criterion, config, preserve_glyphs=config.preserve_type_glyphs.get(mode, ())
        )
    return extractor(text, criterion, config)


def extract_week(
    task_text: str,
    cal_text: str,
    mode: str,
    config: RetroConfig,
    section_order: Optional[Sequence[str]] = None,
) -> Dict[str, List[str]]:
    """
    Extract every enabled section of one week for a mode.

    Args:
        task_text: Weekly task summary report
        cal_text: Weekly calendar summary report
        mode: "good" or "bad"
        config: Retro configuration
        section_order: Sections to process, defaults to config.section_order

    Returns:
        Dict[str, List[str]]: Items per section, keyed in section order. Sections
        disabled for the mode or missing configuration are absent; enabled
        sections with nothing to report map to an empty list.
    """
    if mode not in MODES:
        logger.warning(f"Unknown retro mode {mode!r}, nothing extracted")
        return {}

    order = config.section_order if section_order is None else section_order
    result: Dict[str, List[str]] = {}
    for section_name in order:
        section = config.sections.get(section_name)
        if section is None:
            logger.warning(f"Section {section_name} has no configuration, skipping")
            continue
        if not section.includes(mode):
            continue
        if config.criterion_for(section_name, mode) is None:
            logger.warning(f"No {mode} criterion for section {section_name}, excluding it")
            continue
        result[section_name] = extract_section_items(
            task_text, cal_text, section_name, mode, config
        )
    return result


def format_section(
    title: str, items: List[str], separator: str, empty_message: str, always_show: bool
) -> str:
    """Render one "===== TITLE =====" block, or "" when there is nothing to show."""
    if not items and not always_show:
        return ""
    body = separator.join(items) if items else empty_message
    return f"{SECTION_HEADER.format(title=title)}\n{body}\n"


def format_weekly_retro(
    result: Dict[str, List[str]], config: RetroConfig, mode: str
) -> str:
    """
    Render a weekly extraction result as text.

    Sections follow config.section_order. Empty sections are omitted unless the
    section is set to always show for the mode, in which case its empty message
    is used.
    """
    blocks = []
    for section_name in config.section_order:
        section = config.sections.get(section_name)
        if section is None or section_name not in result:
            continue
        block = format_section(
            section.title,
            result[section_name],
            section.item_separator,
            section.empty_message,
            section.always_show(mode),
        )
        if block:
            blocks.append(block)
    return "\n".join(blocks).strip()
