"""Retention evaluation — which in-scope tags get deleted.

Each tag carries two independent marks:

- *by count*: the tag sits at or beyond position ``tags_to_keep`` in the
  newest-first ordering.
- *by date*: ``created_at + days_to_keep days`` lies strictly before now.

A disabled criterion (limit of zero) marks every tag, so it never
protects anything.  A tag is deleted only when both marks are set, i.e.
it survives if either criterion protects it.  With ``keep_latest`` the
tag named ``latest`` is never marked by either criterion.

Pure functions: no I/O, no logging.  Callers format the verdicts.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from regprune.domain.rules import RetentionRule
from regprune.domain.types import LATEST_TAG, Tag, TagVerdict, Verdict


def _is_exempt(tag: Tag, rule: RetentionRule) -> bool:
    return rule.keep_latest and tag.name == LATEST_TAG


def _marks(
    tags: Sequence[Tag],
    rule: RetentionRule,
    now: datetime,
) -> list[tuple[bool, bool]]:
    """Return ``(by_count, by_date)`` for each tag, in input order."""
    by_count = [rule.tags_to_keep == 0] * len(tags)
    by_date = [rule.days_to_keep == 0] * len(tags)

    if rule.tags_to_keep > 0:
        for i in range(rule.tags_to_keep, len(tags)):
            if not _is_exempt(tags[i], rule):
                by_count[i] = True

    if rule.days_to_keep > 0:
        window = timedelta(days=rule.days_to_keep)
        for i, tag in enumerate(tags):
            if _is_exempt(tag, rule):
                continue
            if tag.created_at + window < now:
                by_date[i] = True

    return list(zip(by_count, by_date, strict=True))


def evaluate_verdicts(
    tags: Sequence[Tag],
    rule: RetentionRule,
    *,
    now: datetime | None = None,
) -> list[TagVerdict]:
    """Return a retain/delete verdict for every tag, in input order.

    Args:
        tags: In-scope tags, sorted newest-first.
        rule: A validated retention rule.
        now: Reference time for the date criterion (default: current UTC).
    """
    if now is None:
        now = datetime.now(UTC)
    return [
        TagVerdict(tag=tag, verdict=Verdict.DELETE if count and date else Verdict.RETAIN)
        for tag, (count, date) in zip(tags, _marks(tags, rule, now), strict=True)
    ]


def evaluate(
    tags: Sequence[Tag],
    rule: RetentionRule,
    *,
    now: datetime | None = None,
) -> set[str]:
    """Return the names of the tags to delete under *rule*."""
    return {
        v.tag.name
        for v in evaluate_verdicts(tags, rule, now=now)
        if v.verdict is Verdict.DELETE
    }
