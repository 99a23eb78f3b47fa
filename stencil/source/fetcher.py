"""Archive download and extraction.

``ArchiveFetcher`` downloads a repository tarball with httpx.
``ArchiveUnpacker`` extracts it into a fresh destination directory, dropping
the archive's leading ``{repo}-{ref}/`` directory.  Unpacking into a
directory that already has content is refused; merging into an existing tree
is not supported.
"""

from __future__ import annotations

import io
import tarfile
from pathlib import Path, PurePosixPath

import httpx

from stencil.source.repository import Repository
from stencil.utils import print_warning


class FetchError(Exception):
    """Raised when the archive cannot be downloaded."""

    def __init__(self, message: str, url: str = "", status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class UnpackError(Exception):
    """Raised when the archive cannot be extracted into the destination."""


class ArchiveFetcher:
    """Downloads repository tarballs.

    Args:
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, repository: Repository) -> bytes:
        """Download the tarball for *repository* and return its bytes."""
        url = repository.tar_url
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            try:
                response = await client.get(url)
            except httpx.HTTPError as exc:
                raise FetchError(f"Request failed: {exc}", url=url) from exc

        if response.status_code != 200:
            raise FetchError(
                f"Request failed with the code: {response.status_code}.",
                url=url,
                status_code=response.status_code,
            )
        return response.content


def _strip_leading(name: str) -> PurePosixPath | None:
    parts = PurePosixPath(name).parts[1:]
    if not parts:
        return None
    return PurePosixPath(*parts)


class ArchiveUnpacker:
    """Extracts gzipped tarballs into an empty destination directory."""

    def unpack(self, data: bytes, destination: str | Path) -> list[Path]:
        """Extract *data* into *destination*.

        Returns:
            Every file and directory written, in archive order.

        Raises:
            UnpackError: If *destination* exists and is not an empty
                directory, if the archive is unreadable, or if an entry would
                land outside *destination*.
        """
        root = Path(destination)
        if root.exists() and (not root.is_dir() or any(root.iterdir())):
            raise UnpackError(f"Destination '{root}' already exists and is not empty.")

        try:
            archive = tarfile.open(fileobj=io.BytesIO(data), mode="r:gz")
        except (tarfile.TarError, OSError) as exc:
            raise UnpackError(f"Couldn't read the tarball: {exc}") from exc

        written: list[Path] = []
        with archive:
            members = archive.getmembers()
            for member in members:
                relative = _strip_leading(member.name)
                if relative is None:
                    continue
                if relative.is_absolute() or ".." in relative.parts:
                    raise UnpackError(f"Archive entry '{member.name}' escapes the destination.")

                target = root.joinpath(*relative.parts)
                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                elif member.isfile():
                    source = archive.extractfile(member)
                    if source is None:
                        continue
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with source:
                        target.write_bytes(source.read())
                    target.chmod(member.mode & 0o777 or 0o644)
                else:
                    print_warning(f"Skipping unsupported archive entry '{member.name}'.")
                    continue
                written.append(target)

        root.mkdir(parents=True, exist_ok=True)
        return written
