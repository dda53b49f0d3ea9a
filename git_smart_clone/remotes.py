"""Normalization of remote spellings into a single RemoteIdentity."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from .exceptions import InvalidSpecError
from .models import RemoteIdentity

DEFAULT_HOST = "github.com"
HUGGINGFACE_HOST = "huggingface.co"

_SCP_RE = re.compile(r"^(?:[^@/:\s]+@)?(?P<host>[^/:\s]+):(?P<path>[^\s]+)$")
_SHORTHAND_RE = re.compile(r"^[\w.-]+/[\w.-]+$")
_DATASET_RE = re.compile(r"^datasets/[\w.-]+/[\w.-]+$")
_URL_SCHEMES = {"https", "http", "ssh", "git", "git+ssh", "ssh+git"}

# ``git@host:`` and ``ssh://user@host/`` carry an '@' that is never a ref separator.
_USERINFO_PREFIX_RE = re.compile(
    r"^(?:[A-Za-z][A-Za-z0-9+.-]*://[^/@\s]+@|[^/@:\s]+@(?=[^/:\s]+:))"
)


def normalize_remote(spec: str) -> RemoteIdentity:
    """Return the canonical identity for any supported remote spelling.

    Accepted forms: ``owner/repo`` (GitHub), ``datasets/owner/repo``
    (Hugging Face datasets), ``https://host/owner/repo[.git]``,
    ``ssh://git@host/owner/repo[.git]`` and ``git@host:owner/repo[.git]``.
    """

    value = spec.strip()
    if not value or any(ch.isspace() for ch in value):
        raise InvalidSpecError(f"Invalid repository spec: {spec!r}")
    if "://" in value:
        host, path = _split_url(value)
    elif _DATASET_RE.match(value.rstrip("/")):
        host, path = HUGGINGFACE_HOST, value
    elif _SHORTHAND_RE.match(_strip_suffixes(value)):
        host, path = DEFAULT_HOST, value
    else:
        match = _SCP_RE.match(value)
        if not match:
            raise InvalidSpecError(f"Invalid repository spec: {spec!r}")
        host, path = match.group("host"), match.group("path")
    path = _strip_suffixes(path).strip("/")
    parts = [part for part in path.split("/") if part]
    if not host or len(parts) < 2:
        raise InvalidSpecError(
            f"Remote must look like <host>/<owner>/<repo>: {spec!r}"
        )
    return RemoteIdentity(host=host.lower(), path="/".join(parts))


def split_ref(spec: str) -> tuple[str, str | None]:
    """Split ``repo@ref`` into ``(repo, ref)``; ``ref`` is None when absent."""

    prefix = ""
    rest = spec
    match = _USERINFO_PREFIX_RE.match(spec)
    if match:
        prefix = match.group(0)
        rest = spec[match.end():]
    if "@" not in rest:
        return spec, None
    repo, _, ref = rest.rpartition("@")
    return prefix + repo, ref


def _split_url(value: str) -> tuple[str, str]:
    parsed = urlparse(value)
    if parsed.scheme.lower() not in _URL_SCHEMES:
        raise InvalidSpecError(f"Unsupported URL scheme: {value!r}")
    host = parsed.hostname or ""
    if parsed.port and parsed.scheme.lower() in {"https", "http"}:
        host = f"{host}:{parsed.port}"
    return host, parsed.path


def _strip_suffixes(path: str) -> str:
    path = path.rstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return path.rstrip("/")


__all__ = ["normalize_remote", "split_ref", "DEFAULT_HOST"]
