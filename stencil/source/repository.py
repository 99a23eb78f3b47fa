"""Repository identifiers.

Parses the ``[host:]user/repo[#ref]`` shortcut accepted on the command line
and resolves the tarball URL for the host.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field


class RepositoryError(Exception):
    """Raised when a repository identifier cannot be parsed."""


class RepositoryHost(str, Enum):
    """Supported hosts. GitHub is the default."""
    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"


_HOST_ALIASES: dict[str, RepositoryHost] = {
    "github": RepositoryHost.GITHUB,
    "gh": RepositoryHost.GITHUB,
    "gitlab": RepositoryHost.GITLAB,
    "gl": RepositoryHost.GITLAB,
    "bitbucket": RepositoryHost.BITBUCKET,
    "bb": RepositoryHost.BITBUCKET,
}

_SHORTCUT = re.compile(
    r"^(?:(?P<host>[^:/#]*):)?"
    r"(?P<user>[^/#]*)"
    r"(?:/(?P<repo>[^#]*))?"
    r"(?:#(?P<ref>.*))?$"
)
_USER = re.compile(r"^[A-Za-z0-9_-]+$")
_REPO = re.compile(r"^[A-Za-z0-9_.-]+$")


class Repository(BaseModel):
    """A template repository on a known host."""
    host: RepositoryHost = Field(default=RepositoryHost.GITHUB)
    user: str
    repo: str
    ref: str = Field(default="HEAD", description="Branch, tag or commit")

    @property
    def tar_url(self) -> str:
        """URL of the gzipped tarball for ``ref``."""
        user, repo, ref = self.user, self.repo, self.ref
        if self.host is RepositoryHost.GITLAB:
            return f"https://gitlab.com/{user}/{repo}/-/archive/{ref}/{repo}.tar.gz"
        if self.host is RepositoryHost.BITBUCKET:
            return f"https://bitbucket.org/{user}/{repo}/get/{ref}.tar.gz"
        return f"https://github.com/{user}/{repo}/archive/{ref}.tar.gz"

    def __str__(self) -> str:
        return f"{self.host.value}:{self.user}/{self.repo}#{self.ref}"


def parse_repository(identifier: str) -> Repository:
    """Parse ``[host:]user/repo[#ref]``.

    Examples::

        parse_repository("acme/widget")
        parse_repository("gl:acme/widget#v1.2.0")

    Raises:
        RepositoryError: With a readable explanation when the identifier is
            malformed or names an unknown host.
    """
    found = _SHORTCUT.match(identifier.strip())
    if found is None:
        raise RepositoryError(f"Cannot parse repository identifier '{identifier}'.")

    host_name, user, repo, ref = found.group("host", "user", "repo", "ref")

    host = RepositoryHost.GITHUB
    if host_name is not None:
        if not host_name:
            raise RepositoryError("Host can't be zero-length.")
        if host_name.lower() not in _HOST_ALIASES:
            raise RepositoryError("Host must be one of: github/gh, gitlab/gl, or bitbucket/bb.")
        host = _HOST_ALIASES[host_name.lower()]

    if not _USER.match(user or ""):
        raise RepositoryError("Must be a valid user name. Allowed symbols: [a-zA-Z0-9_-]")
    if repo is None:
        raise RepositoryError(
            "There must be a slash between the user name and the repository name."
        )
    if not _REPO.match(repo):
        raise RepositoryError("Must be a valid repository name. Allowed symbols: [a-zA-Z0-9_-.]")

    if ref is not None:
        if not ref:
            raise RepositoryError("Meta can't be zero-length.")
        if not ref.isascii() or any(ch.isspace() for ch in ref):
            raise RepositoryError(f"Invalid ref '{ref}'.")
        return Repository(host=host, user=user, repo=repo, ref=ref)

    return Repository(host=host, user=user, repo=repo)
