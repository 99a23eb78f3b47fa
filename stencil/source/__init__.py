"""Template sources: repository identifiers, download and extraction."""

from stencil.source.fetcher import ArchiveFetcher, ArchiveUnpacker, FetchError, UnpackError
from stencil.source.repository import (
    Repository,
    RepositoryError,
    RepositoryHost,
    parse_repository,
)

__all__ = [
    "ArchiveFetcher",
    "ArchiveUnpacker",
    "FetchError",
    "Repository",
    "RepositoryError",
    "RepositoryHost",
    "UnpackError",
    "parse_repository",
]
