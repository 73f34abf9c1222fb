"""
Criteria matching for retro items.

A criterion decides whether one line or block of report text belongs in the
"good" or "bad" retro for a section. Matching is plain, case-sensitive
substring containment because the reports mark status with glyphs.
"""

import logging

from schema.retro_models import AllCriterion, ExcludeList, IncludeList, NoneCriterion

# Configure logging
logger = logging.getLogger(__name__)


def matches(item: str, criterion) -> bool:
    """
    Check whether an item satisfies a criterion.

    Args:
        item: Line or block of report text
        criterion: AllCriterion, NoneCriterion, IncludeList or ExcludeList

    Returns:
        bool: True if the item is selected. Unknown criterion types never match.
    """
    if isinstance(criterion, AllCriterion):
        return True
    if isinstance(criterion, NoneCriterion):
        return False
    if isinstance(criterion, IncludeList):
        return any(term in item for term in criterion.terms)
    if isinstance(criterion, ExcludeList):
        return not any(term in item for term in criterion.terms)

    logger.debug(f"Unrecognized criterion {criterion!r}, treating as none")
    return False
