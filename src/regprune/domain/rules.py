"""Retention rules — the default rule and name-scoped exception rules.

Rules are validated once at configuration-load time and are immutable
for the duration of a run.  INVARIANT: at least one of ``tags_to_keep``
and ``days_to_keep`` is non-zero; a rule that keeps nothing by either
criterion never reaches the evaluator.

Field names accept both snake_case and the CamelCase keys used by the
YAML configuration files of earlier releases (``TagsToKeep`` and so on).
"""

from __future__ import annotations

import re
from functools import cached_property
from typing import Self

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

MATCH_ALL = ".*"


class RetentionRule(BaseModel):
    """How many recent tags and how many days of tags survive cleanup."""

    model_config = {"frozen": True}

    tags_to_keep: int = Field(
        default=0,
        validation_alias=AliasChoices("tags_to_keep", "TagsToKeep"),
    )
    days_to_keep: int = Field(
        default=0,
        validation_alias=AliasChoices("days_to_keep", "DaysToKeep"),
    )
    keep_latest: bool = Field(
        default=False,
        validation_alias=AliasChoices("keep_latest", "KeepLatest"),
    )

    @model_validator(mode="after")
    def _check_limits(self) -> Self:
        if self.tags_to_keep < 0:
            raise ValueError("tags_to_keep can not be a negative number")
        if self.days_to_keep < 0:
            raise ValueError("days_to_keep can not be a negative number")
        if self.tags_to_keep == 0 and self.days_to_keep == 0:
            raise ValueError("tags_to_keep and days_to_keep are both empty")
        return self


class NamedRetentionRule(RetentionRule):
    """An exception rule scoped to images whose name matches ``name_matcher``.

    Only tags whose name matches ``tag_matcher`` are evaluated under this
    rule; every other tag of the image is excluded from cleanup entirely.
    Both patterns are searched, not anchored.
    """

    name_matcher: str = Field(validation_alias=AliasChoices("name_matcher", "NameMatcher"))
    tag_matcher: str = Field(
        default=MATCH_ALL,
        validation_alias=AliasChoices("tag_matcher", "TagMatcher"),
    )

    @field_validator("tag_matcher", mode="before")
    @classmethod
    def _empty_tag_matcher_matches_all(cls, value: object) -> object:
        if value is None or value == "":
            return MATCH_ALL
        return value

    @field_validator("name_matcher", "tag_matcher")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"invalid regular expression {value!r}: {exc}") from exc
        return value

    @cached_property
    def name_pattern(self) -> re.Pattern[str]:
        return re.compile(self.name_matcher)

    @cached_property
    def tag_pattern(self) -> re.Pattern[str]:
        return re.compile(self.tag_matcher)

    def matches_image(self, image_name: str) -> bool:
        return self.name_pattern.search(image_name) is not None

    def matches_tag(self, tag_name: str) -> bool:
        return self.tag_pattern.search(tag_name) is not None
