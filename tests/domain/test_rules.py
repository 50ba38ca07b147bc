"""Tests for retention rule validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from regprune.domain.rules import MATCH_ALL, NamedRetentionRule, RetentionRule


class TestRetentionRule:
    def test_count_only(self) -> None:
        rule = RetentionRule(tags_to_keep=5)
        assert rule.days_to_keep == 0
        assert rule.keep_latest is False

    def test_vacuous_rule_rejected(self) -> None:
        with pytest.raises(ValidationError, match="both empty"):
            RetentionRule(tags_to_keep=0, days_to_keep=0)

    def test_default_construction_is_vacuous(self) -> None:
        with pytest.raises(ValidationError):
            RetentionRule()

    @pytest.mark.parametrize(
        "kwargs",
        [{"tags_to_keep": -1, "days_to_keep": 1}, {"tags_to_keep": 1, "days_to_keep": -1}],
    )
    def test_negative_rejected(self, kwargs: dict[str, int]) -> None:
        with pytest.raises(ValidationError, match="negative"):
            RetentionRule(**kwargs)

    def test_camel_case_aliases(self) -> None:
        rule = RetentionRule.model_validate({"TagsToKeep": 3, "DaysToKeep": 7, "KeepLatest": True})
        assert (rule.tags_to_keep, rule.days_to_keep, rule.keep_latest) == (3, 7, True)

    def test_frozen(self) -> None:
        rule = RetentionRule(tags_to_keep=1)
        with pytest.raises(ValidationError):
            rule.tags_to_keep = 2  # type: ignore[misc]


class TestNamedRetentionRule:
    def test_tag_matcher_defaults_to_match_all(self) -> None:
        rule = NamedRetentionRule(name_matcher="^app", tags_to_keep=1)
        assert rule.tag_matcher == MATCH_ALL
        assert rule.matches_tag("anything")

    def test_empty_tag_matcher_means_match_all(self) -> None:
        rule = NamedRetentionRule.model_validate(
            {"NameMatcher": "^app", "TagMatcher": "", "TagsToKeep": 1}
        )
        assert rule.tag_matcher == MATCH_ALL

    def test_invalid_name_matcher_rejected(self) -> None:
        with pytest.raises(ValidationError, match="invalid regular expression"):
            NamedRetentionRule(name_matcher="([a-z", tags_to_keep=1)

    def test_invalid_tag_matcher_rejected(self) -> None:
        with pytest.raises(ValidationError, match="invalid regular expression"):
            NamedRetentionRule(name_matcher="ok", tag_matcher="*bad", tags_to_keep=1)

    def test_name_matcher_required(self) -> None:
        with pytest.raises(ValidationError):
            NamedRetentionRule(tags_to_keep=1)  # type: ignore[call-arg]

    def test_vacuous_exception_rejected(self) -> None:
        with pytest.raises(ValidationError, match="both empty"):
            NamedRetentionRule(name_matcher="x")

    def test_matching_is_search(self) -> None:
        rule = NamedRetentionRule(name_matcher="api", tag_matcher=r"\d+$", tags_to_keep=1)
        assert rule.matches_image("team/api/server")
        assert not rule.matches_image("team/web")
        assert rule.matches_tag("build-42")
        assert not rule.matches_tag("build-42-debug")
