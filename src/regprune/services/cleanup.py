"""CleanupService — scan the registry, evaluate retention, delete tags.

Two phases, strictly ordered:

1. **Scan**: every repository in the catalog is loaded, matched to a rule
   and evaluated.  Any registry error aborts here, before a single delete.
2. **Delete** (skipped in dry-run): tags marked ``delete`` are removed by
   digest, in catalog order then newest-first.  The first failure aborts
   the remaining deletions; earlier ones are not rolled back.

Evaluation is per image with no shared state, so metadata fetches may run
on a thread pool (``max_workers > 1``) while results keep catalog order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from regprune.domain.matcher import match_image
from regprune.domain.retention import evaluate_verdicts
from regprune.domain.types import Image, ImageReport, TagVerdict, Verdict
from regprune.infrastructure.registry import RegistryError, TagNotFoundError
from regprune.services.result import REGISTRY_ERROR, TAG_NOT_FOUND, ServiceResult

if TYPE_CHECKING:
    from regprune.config.models import RetentionConfig

log = structlog.get_logger(__name__)


class Registry(Protocol):
    """What the cleanup needs from a registry client."""

    def list_repositories(self) -> list[str]: ...

    def get_image(self, repository: str) -> Image: ...

    def delete_image_tag(self, image: Image, tag_name: str) -> str: ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CleanupService:
    """Applies the configured retention policy to a whole registry."""

    def __init__(
        self,
        registry: Registry,
        retention: RetentionConfig,
        *,
        max_workers: int = 1,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._registry = registry
        self._retention = retention
        self._max_workers = max_workers
        self._clock = clock

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def evaluate_image(self, image: Image, *, now: datetime | None = None) -> ImageReport:
        """Match *image* to its rule and return a verdict for every tag."""
        image = image.sorted_newest_first()
        selection = match_image(image, self._retention.exceptions, self._retention.default)
        verdicts = [TagVerdict(tag=t, verdict=Verdict.EXCLUDE) for t in selection.excluded]
        verdicts.extend(evaluate_verdicts(selection.in_scope, selection.rule, now=now))
        report = ImageReport(image=image, rule_label=selection.label, verdicts=tuple(verdicts))
        log.info(
            "image.evaluated",
            image=image.name,
            rule=selection.label,
            tags=len(image.tags),
            excluded=len(selection.excluded),
            delete=len(report.to_delete),
        )
        return report

    def iter_reports(self) -> Iterator[ImageReport]:
        """Yield one report per repository, in catalog order.

        Raises:
            RegistryError: Listing or loading any repository failed.
        """
        now = self._clock()
        names = self._registry.list_repositories()
        log.debug("catalog.listed", repositories=len(names))
        for image in self._load_images(names):
            yield self.evaluate_image(image, now=now)

    def scan(self) -> list[ImageReport]:
        """Evaluate the whole registry without deleting anything."""
        return list(self.iter_reports())

    def run(self, *, dry_run: bool) -> ServiceResult:
        """Scan the registry and, unless *dry_run*, delete marked tags."""
        return self._execute("clean", dry_run=dry_run)

    def plan(self) -> ServiceResult:
        """Report what ``run`` would delete; never deletes."""
        return self._execute("scan", dry_run=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _execute(self, op: str, *, dry_run: bool) -> ServiceResult:
        reports: list[ImageReport] = []
        deleted: list[dict[str, str]] = []

        try:
            for report in self.iter_reports():
                reports.append(report)
        except RegistryError as exc:
            log.error("scan.aborted", error=str(exc), scanned=len(reports))
            return ServiceResult.failure(
                op,
                REGISTRY_ERROR,
                str(exc),
                data=_payload(reports, deleted, dry_run=dry_run),
                detail={"phase": "scan"},
            )

        if not dry_run:
            try:
                self._delete(reports, deleted)
            except RegistryError as exc:
                code = TAG_NOT_FOUND if isinstance(exc, TagNotFoundError) else REGISTRY_ERROR
                log.error("delete.aborted", error=str(exc), deleted=len(deleted))
                return ServiceResult.failure(
                    op,
                    code,
                    str(exc),
                    data=_payload(reports, deleted, dry_run=dry_run),
                    detail={"phase": "delete"},
                )

        return ServiceResult(ok=True, op=op, data=_payload(reports, deleted, dry_run=dry_run))

    def _load_images(self, names: list[str]) -> Iterable[Image]:
        if self._max_workers <= 1 or len(names) <= 1:
            return (self._registry.get_image(name) for name in names)
        return self._load_images_pooled(names)

    def _load_images_pooled(self, names: list[str]) -> Iterator[Image]:
        pool = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="regprune")
        try:
            yield from pool.map(self._registry.get_image, names)
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

    def _delete(self, reports: list[ImageReport], deleted: list[dict[str, str]]) -> None:
        for report in reports:
            for tag in report.deleted_tags():
                digest = self._registry.delete_image_tag(report.image, tag.name)
                log.info("tag.deleted", image=report.image.name, tag=tag.name, digest=digest)
                deleted.append({"image": report.image.name, "tag": tag.name, "digest": digest})


def _payload(
    reports: list[ImageReport],
    deleted: list[dict[str, str]],
    *,
    dry_run: bool,
) -> dict[str, Any]:
    deletions = {r.image.name: r.to_delete for r in reports if r.to_delete}
    return {
        "dry_run": dry_run,
        "images": [r.to_dict() for r in reports],
        "deletions": deletions,
        "deleted": deleted,
        "image_count": len(reports),
        "delete_count": sum(len(tags) for tags in deletions.values()),
        "deleted_count": len(deleted),
    }
