"""
Locate named sections inside weekly report text.

Reports are free text with sections introduced by header lines such as
``===== CAL SUMMARY =====``. Monthly report text is a concatenation of weekly
reports separated by ``+++ Week 12 Recap Personal Tasks +++`` markers.
"""

import logging
import re
from typing import List

# Configure logging
logger = logging.getLogger(__name__)

HEADER_DELIMITER = "====="


def _name_pattern(section_name: str) -> str:
    # CAL_SUMMARY and "CAL SUMMARY" refer to the same header
    words = [re.escape(word) for word in re.split(r"[\s_]+", section_name.strip()) if word]
    return r"[\s_]+".join(words)


def locate(blob: str, section_name: str) -> str:
    """
    Return the text of a named section.

    The header must start a line and is matched case-insensitively. The section body runs until the next
    ``=====`` header line or the end of the blob and is returned trimmed.

    Args:
        blob: Full report text
        section_name: Section name, with spaces or underscores between words

    Returns:
        str: Section body, or "" when the section is absent
    """
    if not blob or not section_name or not section_name.strip():
        return ""

    pattern = re.compile(
        rf"^[ \t]*{HEADER_DELIMITER}\s*{_name_pattern(section_name)}\s*{HEADER_DELIMITER}"
        rf"(.*?)(?=\n\s*{HEADER_DELIMITER}|\Z)",
        re.IGNORECASE | re.DOTALL | re.MULTILINE,
    )
    match = pattern.search(blob)
    if not match:
        logger.debug(f"Section {section_name!r} not found in report")
        return ""
    return match.group(1).strip()


def split_weekly_blocks(monthly_text: str, label: str) -> List[str]:
    """
    Split a monthly concatenation of weekly reports into per-week blocks.

    Args:
        monthly_text: Text containing ``+++ Week N Recap ... <label> +++`` markers
        label: Report type closing the marker, e.g. "Tasks" or "Cal"

    Returns:
        List[str]: Non-empty week blocks in the order they appear
    """
    if not monthly_text:
        return []

    marker = re.compile(
        rf"\+\+\+\s*Week\s+\d+\s+Recap\b[^+\n]*?\b{re.escape(label)}\s*\+\+\+",
        re.IGNORECASE,
    )
    parts = marker.split(monthly_text)
    # Text before the first marker is not a week
    blocks = [part.strip() for part in parts[1:] if part.strip()]
    logger.debug(f"Found {len(blocks)} weekly {label} blocks")
    return blocks
