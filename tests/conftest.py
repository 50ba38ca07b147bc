"""Shared pytest fixtures and test helpers for regprune tests."""

from __future__ import annotations

import os
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from click.testing import CliRunner

from regprune.domain.types import Image, Tag
from regprune.infrastructure.registry import RegistryError, TagNotFoundError

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def make_tag(name: str, days_old: float, *, now: datetime = NOW) -> Tag:
    """A tag created *days_old* days before *now*, digest derived from name."""
    return Tag(
        name=name,
        content_digest=f"sha256:{name}",
        created_at=now - timedelta(days=days_old),
    )


def make_image(name: str, ages: dict[str, float]) -> Image:
    """Image whose tags are given as ``{tag_name: days_old}``, sorted newest-first."""
    tags = tuple(make_tag(tag, age) for tag, age in ages.items())
    return Image(name=name, tags=tags).sorted_newest_first()


class FakeRegistry:
    """In-memory stand-in for RegistryClient, recording delete calls."""

    def __init__(
        self,
        images: Iterable[Image],
        *,
        fail_on_get: str | None = None,
        fail_on_delete: str | None = None,
    ) -> None:
        self.images = {image.name: image for image in images}
        self.fail_on_get = fail_on_get
        self.fail_on_delete = fail_on_delete
        self.get_calls: list[str] = []
        self.delete_calls: list[tuple[str, str]] = []

    def list_repositories(self) -> list[str]:
        return list(self.images)

    def get_image(self, repository: str) -> Image:
        self.get_calls.append(repository)
        if repository == self.fail_on_get:
            raise RegistryError(f"GET /v2/{repository}/tags/list returned 500")
        return self.images[repository]

    def delete_image_tag(self, image: Image, tag_name: str) -> str:
        if f"{image.name}:{tag_name}" == self.fail_on_delete:
            raise RegistryError("DELETE returned 405 Method Not Allowed")
        tag = image.find_tag(tag_name)
        if tag is None:
            raise TagNotFoundError(image.name, tag_name)
        self.delete_calls.append((image.name, tag.content_digest))
        return tag.content_digest


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run in an empty temp dir with no config env var leaking in."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("REGPRUNE_"):
            monkeypatch.delenv(key, raising=False)
