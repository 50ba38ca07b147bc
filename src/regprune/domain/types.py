"""Per-tag verdicts and image/tag value types.

Image and Tag are built fresh from live registry data on every run and
never persisted.  INVARIANT: evaluation only ever sees tags ordered
newest-first (see :meth:`Image.sorted_newest_first`).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum

LATEST_TAG = "latest"


class Verdict(StrEnum):
    """Outcome of evaluating a single tag."""

    RETAIN = "retain"
    EXCLUDE = "exclude"
    DELETE = "delete"

    @property
    def label(self) -> str:
        """Word printed in the audit trail."""
        if self is Verdict.EXCLUDE:
            return "excluded"
        return self.value


@dataclass(frozen=True)
class Tag:
    """A named pointer to one manifest within a repository."""

    name: str
    content_digest: str
    created_at: datetime


@dataclass(frozen=True)
class Image:
    """A repository and its full tag history."""

    name: str
    tags: tuple[Tag, ...] = field(default_factory=tuple)

    def sorted_newest_first(self) -> Image:
        """Return a copy with tags ordered by ``created_at`` descending.

        The sort is stable, so tags sharing a timestamp keep their
        registry order.
        """
        ordered = sorted(self.tags, key=lambda t: t.created_at, reverse=True)
        return replace(self, tags=tuple(ordered))

    def find_tag(self, name: str) -> Tag | None:
        for tag in self.tags:
            if tag.name == name:
                return tag
        return None


@dataclass(frozen=True)
class TagVerdict:
    """A tag paired with the verdict reached for it."""

    tag: Tag
    verdict: Verdict


@dataclass(frozen=True)
class ImageReport:
    """Outcome of evaluating one image.

    Attributes:
        image: The (sorted) image snapshot the verdicts refer to.
        rule_label: ``"default"`` or the matching exception's name matcher.
        verdicts: Excluded tags first, then evaluated tags newest-first.
    """

    image: Image
    rule_label: str
    verdicts: tuple[TagVerdict, ...] = ()

    @property
    def to_delete(self) -> list[str]:
        """Names of tags marked for deletion, newest-first."""
        return [t.name for t in self.deleted_tags()]

    def deleted_tags(self) -> list[Tag]:
        """Tags whose verdict is ``delete``, in verdict order."""
        return [v.tag for v in self.verdicts if v.verdict is Verdict.DELETE]

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.image.name,
            "rule": self.rule_label,
            "tags": [
                {
                    "name": v.tag.name,
                    "verdict": v.verdict.value,
                    "digest": v.tag.content_digest,
                    "created": v.tag.created_at.isoformat(),
                }
                for v in self.verdicts
            ],
        }
