"""Rule selection and tag scoping for a single image.

Exceptions are tried in configuration order and the first whose name
matcher finds a match in the image name wins.  An image only ever gets
one rule: tags outside the winning exception's tag matcher are excluded,
they do not fall back to the default rule.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from regprune.domain.rules import NamedRetentionRule, RetentionRule
from regprune.domain.types import Image, Tag

DEFAULT_LABEL = "default"


@dataclass(frozen=True)
class RuleSelection:
    """The rule applied to an image and the tags it applies to."""

    rule: RetentionRule
    label: str
    in_scope: tuple[Tag, ...]
    excluded: tuple[Tag, ...]


def select_rule(
    image_name: str,
    exceptions: Sequence[NamedRetentionRule],
    default: RetentionRule,
) -> tuple[RetentionRule, str]:
    """Return ``(rule, label)`` for *image_name*.

    Examples:
        >>> default = RetentionRule(tags_to_keep=10)
        >>> rules = [
        ...     NamedRetentionRule(name_matcher="^foo", tags_to_keep=1),
        ...     NamedRetentionRule(name_matcher="^fo", tags_to_keep=2),
        ... ]
        >>> select_rule("foobar", rules, default)[1]
        '^foo'
        >>> select_rule("bar", rules, default)[1]
        'default'
    """
    for rule in exceptions:
        if rule.matches_image(image_name):
            return rule, rule.name_matcher
    return default, DEFAULT_LABEL


def partition_tags(
    tags: Sequence[Tag],
    rule: RetentionRule,
) -> tuple[tuple[Tag, ...], tuple[Tag, ...]]:
    """Split *tags* into ``(in_scope, excluded)`` without mutating the input.

    Only exception rules exclude anything.  Relative order is preserved
    in both halves.
    """
    if not isinstance(rule, NamedRetentionRule):
        return tuple(tags), ()
    in_scope: list[Tag] = []
    excluded: list[Tag] = []
    for tag in tags:
        (in_scope if rule.matches_tag(tag.name) else excluded).append(tag)
    return tuple(in_scope), tuple(excluded)


def match_image(
    image: Image,
    exceptions: Sequence[NamedRetentionRule],
    default: RetentionRule,
) -> RuleSelection:
    """Select the rule for *image* and scope its tags to that rule."""
    rule, label = select_rule(image.name, exceptions, default)
    in_scope, excluded = partition_tags(image.tags, rule)
    return RuleSelection(rule=rule, label=label, in_scope=in_scope, excluded=excluded)
