"""
Pydantic models for the retro extraction engine.

Configuration values (criteria, sections, habit rules) are frozen so a loaded
config can be shared between calls without being mutated. Results are plain
ordered mappings of section name to rendered strings.
"""

import re
from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


Mode = Literal["good", "bad"]
MODES: Tuple[str, ...] = ("good", "bad")


# Evaluation criteria


class AllCriterion(BaseModel):
    """Every item matches."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["all"] = "all"


class NoneCriterion(BaseModel):
    """No item matches."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class IncludeList(BaseModel):
    """Item matches if it contains any of the terms."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["include"] = "include"
    terms: Tuple[str, ...] = Field(..., description="Substrings that select an item")


class ExcludeList(BaseModel):
    """Item matches unless it contains one of the terms."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["exclude"] = "exclude"
    terms: Tuple[str, ...] = Field(..., description="Substrings that reject an item")


Criterion = Annotated[
    Union[AllCriterion, NoneCriterion, IncludeList, ExcludeList],
    Field(discriminator="kind"),
]


def parse_criterion(value) -> Union[AllCriterion, NoneCriterion, IncludeList, ExcludeList]:
    """
    Convert the shorthand criterion notation into a tagged criterion.

    Accepted forms: "all", "none", a list of terms, {"not": [terms]} or an
    already tagged mapping such as {"kind": "include", "terms": [...]}.

    Raises:
        ValueError: If the value is none of the accepted forms
    """
    if isinstance(value, (AllCriterion, NoneCriterion, IncludeList, ExcludeList)):
        return value
    if isinstance(value, str):
        if value.lower() == "all":
            return AllCriterion()
        if value.lower() == "none":
            return NoneCriterion()
        raise ValueError(f"Unknown criterion keyword: {value!r}")
    if isinstance(value, (list, tuple)):
        return IncludeList(terms=tuple(str(term) for term in value))
    if isinstance(value, dict):
        if "kind" in value:
            kind = value["kind"]
            if kind == "all":
                return AllCriterion()
            if kind == "none":
                return NoneCriterion()
            if kind == "include":
                return IncludeList(terms=tuple(value.get("terms") or ()))
            if kind == "exclude":
                return ExcludeList(terms=tuple(value.get("terms") or ()))
            raise ValueError(f"Unknown criterion kind: {kind!r}")
        if "not" in value and isinstance(value["not"], (list, tuple)):
            return ExcludeList(terms=tuple(str(term) for term in value["not"]))
    raise ValueError(f"Unsupported criterion shape: {value!r}")


class SectionCriteria(BaseModel):
    """Good and bad criteria for one section."""

    model_config = ConfigDict(frozen=True)

    good: Optional[Criterion] = None
    bad: Optional[Criterion] = None

    @field_validator("good", "bad", mode="before")
    @classmethod
    def _coerce_shorthand(cls, value):
        if value is None:
            return None
        return parse_criterion(value)

    def for_mode(self, mode: str):
        return self.good if mode == "good" else self.bad if mode == "bad" else None


# Section configuration


class SectionConfig(BaseModel):
    """Output and lookup settings for one report section."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Title used in formatted output")
    header: Optional[str] = Field(
        default=None, description="Header text searched in the report, defaults to title"
    )
    source: Literal["task", "cal"] = Field(
        default="task", description="Which weekly report blob holds this section"
    )
    include_in_good: bool = False
    include_in_bad: bool = False
    always_show_good_section: bool = False
    always_show_bad_section: bool = False
    empty_message: str = ""
    item_separator: str = "\n"
    fallback_to_full_report: bool = Field(
        default=False,
        description="Scan the whole report when the section header is missing",
    )

    @property
    def header_name(self) -> str:
        return self.header or self.title

    def includes(self, mode: str) -> bool:
        if mode == "good":
            return self.include_in_good
        if mode == "bad":
            return self.include_in_bad
        return False

    def always_show(self, mode: str) -> bool:
        if mode == "good":
            return self.always_show_good_section
        if mode == "bad":
            return self.always_show_bad_section
        return False


# Habit rules


class HabitRule(BaseModel):
    """
    Threshold rule for one monthly habit number.

    Either the per-week pair (scaled by the month's week count) or the
    absolute pair must be set. `operator` only applies to absolute
    thresholds: ">=" means higher is better, "<=" means lower is better.
    """

    model_config = ConfigDict(frozen=True)

    pattern: str = Field(..., description="Regex whose first group is the value")
    description: str
    emoji: str = ""
    good_per_week: Optional[float] = None
    warning_per_week: Optional[float] = None
    good_absolute: Optional[float] = None
    warning_absolute: Optional[float] = None
    operator: Literal[">=", "<="] = ">="

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid habit pattern {value!r}: {e}")
        return value

    @model_validator(mode="after")
    def _has_thresholds(self):
        per_week = self.good_per_week is not None and self.warning_per_week is not None
        absolute = self.good_absolute is not None and self.warning_absolute is not None
        if not per_week and not absolute:
            raise ValueError(
                "Habit rule needs good_per_week/warning_per_week or good_absolute/warning_absolute"
            )
        return self


class HobbyRule(BaseModel):
    """
    Composite hobby score rule.

    score = reading + art + coding - gaming, compared against fixed thresholds.
    Values come either from `combined_pattern` (named groups reading, art,
    coding, gaming) or from the four independent patterns.
    """

    model_config = ConfigDict(frozen=True)

    description: str = "hobby habits"
    emoji: str = "📖"
    combined_pattern: Optional[str] = None
    reading_pattern: Optional[str] = None
    art_pattern: Optional[str] = None
    coding_pattern: Optional[str] = None
    gaming_pattern: Optional[str] = None
    good_absolute: float = 5
    warning_absolute: float = 1

    @field_validator(
        "combined_pattern",
        "reading_pattern",
        "art_pattern",
        "coding_pattern",
        "gaming_pattern",
    )
    @classmethod
    def _pattern_compiles(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"Invalid hobby pattern {value!r}: {e}")
        return value


class RetroConfig(BaseModel):
    """Complete, read-only configuration for extraction, aggregation and habits."""

    model_config = ConfigDict(frozen=True)

    section_order: Tuple[str, ...]
    sections: Dict[str, SectionConfig]
    evaluation_criteria: Dict[str, SectionCriteria] = Field(default_factory=dict)
    category_mappings: Dict[str, str] = Field(default_factory=dict)
    cal_summary_zero_item_replacements: Dict[str, str] = Field(default_factory=dict)
    cal_event_details: Dict[str, bool] = Field(
        default_factory=dict, description="Monthly show-details flag per calendar category"
    )
    task_details: Dict[str, bool] = Field(
        default_factory=dict, description="Monthly show-details flag per task category"
    )
    tasks_show_item_patterns: Tuple[str, ...] = ()
    tasks_hide_item_patterns: Tuple[str, ...] = ()
    status_glyphs: Tuple[str, ...] = ("✅", "❌", "☑️", "⚠️")
    preserve_type_glyphs: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)
    habit_rules: Dict[str, HabitRule] = Field(default_factory=dict)
    hobby_rule: Optional[HobbyRule] = None

    def criterion_for(self, section_name: str, mode: str):
        """Criterion for (section, mode), or None when not configured."""
        criteria = self.evaluation_criteria.get(section_name)
        if criteria is None:
            return None
        return criteria.for_mode(mode)


# Results


class HabitEvaluation(BaseModel):
    """Monthly habit lines split into good and bad buckets."""

    good: List[str] = Field(default_factory=list)
    bad: List[str] = Field(default_factory=list)

    def for_mode(self, mode: str) -> List[str]:
        return list(self.good) if mode == "good" else list(self.bad)


class RetroRecord(BaseModel):
    """A finished weekly or monthly retro ready to hand to a store."""

    record_id: str = Field(..., description="Unique record identifier.")
    period: Literal["week", "month"] = Field(..., description="Period type.")
    period_number: int = Field(..., description="Week or month number.")
    good_text: str = Field(default="", description="What went well.")
    bad_text: str = Field(default="", description="What didn't go so well.")
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Timestamp when the record was created.",
    )
    metadata: Optional[Dict[str, str]] = Field(
        default=None, description="Additional metadata for the record."
    )
