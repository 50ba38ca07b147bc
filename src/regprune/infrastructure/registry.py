"""RegistryClient — Docker Registry HTTP API v2 over httpx.

Endpoints used:

- ``GET /v2/_catalog`` — list repositories (``Link`` pagination followed)
- ``GET /v2/<name>/tags/list`` — list tags
- ``GET /v2/<name>/manifests/<tag>`` — manifest body and digest header
- ``GET /v2/<name>/blobs/<digest>`` — image config (creation time)
- ``DELETE /v2/<name>/manifests/<digest>`` — delete by content digest

Every failure (transport error, non-2xx status, malformed body) raises
:class:`RegistryError`.  There are no retries.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Self
from urllib.parse import urljoin

import httpx

from regprune.domain.types import Image, Tag

if TYPE_CHECKING:
    from regprune.config.models import RegistryConfig

logger = logging.getLogger(__name__)

MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"
DIGEST_HEADER = "Docker-Content-Digest"


class RegistryError(Exception):
    """A registry request failed or returned something unusable."""


class TagNotFoundError(RegistryError):
    """A tag is absent from the image snapshot being cleaned."""

    def __init__(self, image: str, tag: str) -> None:
        super().__init__(f"image [{image}:{tag}] doesn't exist")
        self.image = image
        self.tag = tag


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp as an aware datetime.

    Registries emit nanosecond precision, which :func:`datetime.fromisoformat`
    rejects, so the fraction is truncated to microseconds.

    Examples:
        >>> parse_timestamp("2024-03-01T10:20:30.123456789Z").isoformat()
        '2024-03-01T10:20:30.123456+00:00'
        >>> parse_timestamp("2024-03-01T10:20:30+02:00").isoformat()
        '2024-03-01T10:20:30+02:00'
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    if "." in text:
        head, _, rest = text.partition(".")
        digits = len(rest) - len(rest.lstrip("0123456789"))
        fraction = rest[:digits][:6].ljust(6, "0")
        text = f"{head}.{fraction}{rest[digits:]}"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class RegistryClient:
    """Thin synchronous client for the registry endpoints regprune needs.

    Usage::

        with RegistryClient.from_config(settings.registry) as client:
            for name in client.list_repositories():
                image = client.get_image(name)
    """

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    @classmethod
    def from_config(cls, config: RegistryConfig) -> RegistryClient:
        """Build a client with auth, timeout, and TLS settings applied."""
        auth = None
        if config.username:
            password = config.password.get_secret_value() if config.password else ""
            auth = httpx.BasicAuth(config.username, password)
        http = httpx.Client(
            base_url=config.url,
            auth=auth,
            timeout=config.timeout,
            verify=config.verify_tls,
            follow_redirects=True,
            headers={"Accept": MANIFEST_V2},
        )
        return cls(http)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_repositories(self) -> list[str]:
        """Return every repository in the catalog, in registry order."""
        repositories: list[str] = []
        url: str | None = "/v2/_catalog"
        while url is not None:
            response = self._request("GET", url)
            body = self._json(response)
            repositories.extend(body.get("repositories") or [])
            url = self._next_page(response)
        return repositories

    def list_tags(self, repository: str) -> list[str]:
        body = self._json(self._request("GET", f"/v2/{repository}/tags/list"))
        return list(body.get("tags") or [])

    def get_tag_content_digest(self, repository: str, tag: str) -> str:
        return self._content_digest(self._get_manifest(repository, tag), repository, tag)

    def get_tag_creation_time(self, repository: str, tag: str) -> datetime:
        """Read ``created`` from the image config blob the manifest points at."""
        return self._creation_time(self._get_manifest(repository, tag), repository, tag)

    def get_tag(self, repository: str, name: str) -> Tag:
        """Digest and creation time of one tag, from a single manifest fetch."""
        manifest = self._get_manifest(repository, name)
        return Tag(
            name=name,
            content_digest=self._content_digest(manifest, repository, name),
            created_at=self._creation_time(manifest, repository, name),
        )

    def get_image(self, repository: str) -> Image:
        """Load full tag metadata for *repository*, sorted newest-first."""
        tags = [self.get_tag(repository, name) for name in self.list_tags(repository)]
        logger.debug("Loaded %d tags for %s", len(tags), repository)
        return Image(name=repository, tags=tuple(tags)).sorted_newest_first()

    def delete_tag(self, repository: str, digest: str) -> None:
        self._request("DELETE", f"/v2/{repository}/manifests/{digest}")

    def delete_image_tag(self, image: Image, tag_name: str) -> str:
        """Delete *tag_name* of *image* by its digest; return the digest.

        Raises:
            TagNotFoundError: *tag_name* is not in the image snapshot.
        """
        tag = image.find_tag(tag_name)
        if tag is None:
            raise TagNotFoundError(image.name, tag_name)
        self.delete_tag(image.name, tag.content_digest)
        return tag.content_digest

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_manifest(self, repository: str, tag: str) -> httpx.Response:
        return self._request("GET", f"/v2/{repository}/manifests/{tag}")

    @staticmethod
    def _content_digest(manifest: httpx.Response, repository: str, tag: str) -> str:
        digest = manifest.headers.get(DIGEST_HEADER)
        if not digest:
            raise RegistryError(f"header {DIGEST_HEADER} does not exist for {repository}:{tag}")
        return digest

    def _creation_time(self, manifest: httpx.Response, repository: str, tag: str) -> datetime:
        body = self._json(manifest)
        try:
            config_digest = body["config"]["digest"]
        except (KeyError, TypeError) as exc:
            msg = f"manifest for {repository}:{tag} has no config digest"
            raise RegistryError(msg) from exc
        blob = self._json(self._request("GET", f"/v2/{repository}/blobs/{config_digest}"))
        created = blob.get("created")
        if not isinstance(created, str):
            raise RegistryError(f"config blob for {repository}:{tag} has no creation time")
        try:
            return parse_timestamp(created)
        except ValueError as exc:
            raise RegistryError(f"invalid creation time {created!r} for {repository}:{tag}") from exc

    def _request(self, method: str, url: str) -> httpx.Response:
        try:
            response = self._http.request(method, url)
        except httpx.HTTPError as exc:
            raise RegistryError(f"{method} {url} failed: {exc}") from exc
        if not response.is_success:
            raise RegistryError(
                f"{method} {url} returned {response.status_code} {response.reason_phrase}"
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise RegistryError(f"malformed response body from {response.url}") from exc
        if not isinstance(body, dict):
            raise RegistryError(f"unexpected response body from {response.url}")
        return body

    @staticmethod
    def _next_page(response: httpx.Response) -> str | None:
        link = response.links.get("next")
        if not link or not link.get("url"):
            return None
        return urljoin(str(response.url), link["url"])
