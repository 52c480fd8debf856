"""Asset upload transport.

Uploads go straight to storage using signed specifications handed out by
the API, not through the GraphQL endpoint.

- AssetUploader: Protocol (injectable for tests)
- HttpAssetUploader: urllib PUT of the file body
- MockAssetUploader: records uploads
"""

from __future__ import annotations

import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from ota.core.result import Err, Ok, Result

__all__ = [
    "AssetUploader",
    "HttpAssetUploader",
    "MockAssetUploader",
    "UploadError",
    "UploadSpecification",
]


@dataclass(frozen=True, slots=True)
class UploadSpecification:
    """Where and how to upload one asset.

    Attributes:
        url: Signed URL accepting a PUT of the file body
        headers: Extra headers the signature covers
    """

    url: str
    headers: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class UploadError:
    path: Path
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.path.name})"
        return f"{self.message} ({self.path.name})"


@runtime_checkable
class AssetUploader(Protocol):
    def upload(
        self, spec: UploadSpecification, path: Path, content_type: str
    ) -> Result[None, UploadError]: ...


class HttpAssetUploader:
    def __init__(self, timeout: float = 120.0, user_agent: str = "ota-cli") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def upload(
        self, spec: UploadSpecification, path: Path, content_type: str
    ) -> Result[None, UploadError]:
        try:
            body = path.read_bytes()
        except OSError as e:
            return Err(UploadError(path=path, status=0, message=str(e)))

        headers = {"Content-Type": content_type, "User-Agent": self.user_agent}
        headers.update(dict(spec.headers))

        try:
            req = urllib.request.Request(spec.url, data=body, headers=headers, method="PUT")
            with urllib.request.urlopen(req, timeout=self.timeout, context=self._ssl_context):
                return Ok(None)
        except urllib.error.HTTPError as e:
            return Err(UploadError(path=path, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(UploadError(path=path, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(UploadError(path=path, status=0, message="Upload timed out"))
        except OSError as e:
            return Err(UploadError(path=path, status=0, message=str(e)))


def _empty_uploads() -> list[tuple[str, Path, str]]:
    return []


def _empty_failures() -> dict[str, UploadError]:
    return {}


@dataclass
class MockAssetUploader:
    """Records (url, path, content_type) of every upload."""

    uploads: list[tuple[str, Path, str]] = field(default_factory=_empty_uploads)
    failures: dict[str, UploadError] = field(default_factory=_empty_failures)

    def fail(self, url: str, error: UploadError) -> None:
        self.failures[url] = error

    def upload(
        self, spec: UploadSpecification, path: Path, content_type: str
    ) -> Result[None, UploadError]:
        self.uploads.append((spec.url, path, content_type))
        if spec.url in self.failures:
            return Err(self.failures[spec.url])
        return Ok(None)
