"""Latest-version lookups against the npm registry.

Wraps ``GET <registry>/<package>/latest`` with per-request timeouts and a
major-version compatibility table, and rewrites ``package.json`` manifests
with the accepted updates.  Version freshness is a convenience: every
failure degrades to "keep the template's version".

Typical usage::

    async with httpx.AsyncClient() as client:
        resolver = VersionResolver(client=client)
        infos = await resolver.resolve_latest(["fastify"], {"fastify": "5.0.0"})
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from fastify_starter.config import DEFAULT_REGISTRY_URL
from fastify_starter.utils import load_json, write_json

CORE_PACKAGES: tuple[str, ...] = (
    "react-router",
    "fastify",
    "typescript",
    "vite",
    "@types/node",
    "tsx",
    "prisma",
    "@prisma/client",
    "@vitejs/plugin-react",
    "@biomejs/biome",
)

# Packages pinned to a major version for compatibility with the template code.
VERSION_CONSTRAINTS: dict[str, int] = {
    "react-router": 7,
    "fastify": 5,
    "typescript": 5,
    "vite": 6,
    "prisma": 6,
    "@prisma/client": 6,
}

_VERSION_RE = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(-[0-9A-Za-z.-]+)?")
_RANGE_PREFIX_RE = re.compile(r"^[\^~]")
_MANIFEST_SECTIONS: tuple[str, ...] = ("dependencies", "devDependencies")


class VersionInfo(BaseModel):
    """Outcome of one latest-version lookup."""

    name: str
    current_version: str
    latest_version: str
    updated: bool = Field(default=False, description="Whether the manifest should be rewritten")
    resolved: bool = Field(default=False, description="Whether the registry answered")


class VersionUpdateSummary(BaseModel):
    """Result of refreshing every manifest in a project."""

    checked: int = 0
    resolved: int = 0
    updates: list[VersionInfo] = Field(default_factory=list)
    files_updated: list[str] = Field(default_factory=list)

    @property
    def offline(self) -> bool:
        """True when lookups were attempted and none succeeded."""
        return self.checked > 0 and self.resolved == 0


# ---------------------------------------------------------------------------
# Version arithmetic
# ---------------------------------------------------------------------------


def _version_key(version: str) -> Optional[tuple[int, int, int, int]]:
    match = _VERSION_RE.match(version.strip())
    if not match:
        return None
    major, minor, patch, prerelease = match.groups()
    return (int(major), int(minor or 0), int(patch or 0), 0 if prerelease else 1)


def major_version(version: str) -> Optional[int]:
    """Leading numeric component of *version*, or ``None`` if unparsable."""
    key = _version_key(version)
    return key[0] if key else None


def satisfies_constraint(package_name: str, version: str) -> bool:
    """Whether *version* is acceptable for *package_name* under ``VERSION_CONSTRAINTS``."""
    required = VERSION_CONSTRAINTS.get(package_name)
    if required is None:
        return True
    return major_version(version) == required


def is_newer(candidate: str, current: str) -> bool:
    """Whether *candidate* sorts after *current*.  Unparsable candidates never do."""
    candidate_key = _version_key(candidate)
    if candidate_key is None:
        return False
    current_key = _version_key(current)
    if current_key is None:
        return True
    return candidate_key > current_key


def build_version_info(name: str, current: str, latest: Optional[str]) -> VersionInfo:
    """Decide whether *latest* should replace *current* for *name*."""
    if not latest:
        return VersionInfo(name=name, current_version=current, latest_version=current)

    updated = (
        latest != current
        and satisfies_constraint(name, latest)
        and is_newer(latest, current)
    )
    return VersionInfo(
        name=name,
        current_version=current,
        latest_version=latest,
        updated=updated,
        resolved=True,
    )


# ---------------------------------------------------------------------------
# Registry client
# ---------------------------------------------------------------------------


class VersionResolver:
    """Concurrent latest-version lookups.

    The ``httpx.AsyncClient`` is owned by the caller and passed in; when none
    is given a short-lived client is created for each batch.
    """

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        timeout: float = 3.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self.client = client

    async def fetch_latest(
        self,
        client: httpx.AsyncClient,
        package_name: str,
        timeout: float | None = None,
    ) -> Optional[str]:
        """Return the registry's ``latest`` version for one package, or ``None``.

        Timeouts, transport errors, non-2xx responses and malformed bodies
        are all reported as ``None``.
        """
        limit = timeout if timeout is not None else self.timeout
        url = f"{self.registry_url}/{package_name}/latest"
        try:
            response = await asyncio.wait_for(
                client.get(
                    url,
                    headers={"Accept": "application/json", "User-Agent": "fastify-starter"},
                    timeout=limit,
                ),
                timeout=limit,
            )
            response.raise_for_status()
            data = response.json()
        except (asyncio.TimeoutError, httpx.HTTPError, ValueError):
            return None

        if not isinstance(data, dict):
            return None
        version = data.get("version")
        return version if isinstance(version, str) and version else None

    async def fetch_many(
        self,
        package_names: Iterable[str],
        timeout: float | None = None,
    ) -> dict[str, Optional[str]]:
        """Look up every package concurrently; one slow package never blocks the rest."""
        names = list(dict.fromkeys(package_names))
        if not names:
            return {}

        async def _gather(client: httpx.AsyncClient) -> list[Optional[str]]:
            return await asyncio.gather(
                *(self.fetch_latest(client, name, timeout) for name in names)
            )

        if self.client is not None:
            results = await _gather(self.client)
        else:
            async with httpx.AsyncClient() as client:
                results = await _gather(client)
        return dict(zip(names, results))

    async def resolve_latest(
        self,
        package_names: Iterable[str],
        current_versions: Mapping[str, str],
        timeout: float | None = None,
    ) -> list[VersionInfo]:
        """Resolve the latest compatible version for each package.

        Args:
            package_names: Packages to look up.
            current_versions: Current version (without range prefix) per package.
            timeout: Per-lookup timeout in seconds; defaults to ``self.timeout``.

        Returns:
            One ``VersionInfo`` per package, in input order.
        """
        names = list(dict.fromkeys(package_names))
        latest = await self.fetch_many(names, timeout)
        return [
            build_version_info(name, current_versions.get(name, "unknown"), latest.get(name))
            for name in names
        ]


# ---------------------------------------------------------------------------
# Manifest helpers
# ---------------------------------------------------------------------------


def extract_current_versions(manifest: Mapping[str, Any]) -> dict[str, str]:
    """Map dependency name to its version without range prefix.

    Non-semver specifiers such as ``workspace:*`` are skipped.
    """
    versions: dict[str, str] = {}
    for section in _MANIFEST_SECTIONS:
        deps = manifest.get(section) or {}
        if not isinstance(deps, dict):
            continue
        for name, specifier in deps.items():
            if not isinstance(specifier, str):
                continue
            clean = _RANGE_PREFIX_RE.sub("", specifier)
            if _version_key(clean) is not None:
                versions[name] = clean
    return versions


def apply_version_updates(manifest: dict[str, Any], updates: Iterable[VersionInfo]) -> int:
    """Rewrite *manifest* in place for every ``updated`` entry.

    The range prefix already present (``^``, ``~`` or none) is kept.

    Returns:
        Number of dependency entries rewritten.
    """
    changed = 0
    for info in updates:
        if not info.updated:
            continue
        for section in _MANIFEST_SECTIONS:
            deps = manifest.get(section)
            if not isinstance(deps, dict) or info.name not in deps:
                continue
            current = deps[info.name]
            if not isinstance(current, str):
                continue
            match = _RANGE_PREFIX_RE.match(current)
            prefix = match.group(0) if match else ""
            deps[info.name] = f"{prefix}{info.latest_version}"
            changed += 1
    return changed


def find_manifests(project_root: str | Path) -> list[Path]:
    """Every ``package.json`` under *project_root*, outside node_modules and dot-directories."""
    root = Path(project_root)
    found: list[Path] = []

    def _walk(directory: Path) -> None:
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError:
            return
        for entry in entries:
            if entry.is_dir():
                if not entry.name.startswith(".") and entry.name != "node_modules":
                    _walk(entry)
            elif entry.name == "package.json":
                found.append(entry)

    _walk(root)
    return found


async def update_project_versions(
    project_root: str | Path,
    resolver: VersionResolver,
    packages: Iterable[str] = CORE_PACKAGES,
) -> VersionUpdateSummary:
    """Refresh the pinned versions of *packages* in every manifest of a project.

    All lookups happen in a single concurrent batch; each manifest is then
    rewritten with the updates that apply to it.  Each updated package is
    reported once, however many manifests pin it.  Unreadable manifests are
    skipped.
    """
    root = Path(project_root)
    candidates = tuple(packages)
    manifests: list[tuple[Path, dict[str, Any], dict[str, str]]] = []
    for path in find_manifests(root):
        try:
            manifest = load_json(path)
        except (OSError, ValueError):
            continue
        current = extract_current_versions(manifest)
        manifests.append((path, manifest, current))

    wanted = [
        name for name in candidates
        if any(name in current for _, _, current in manifests)
    ]
    summary = VersionUpdateSummary(checked=len(wanted))
    if not wanted:
        return summary

    latest = await resolver.fetch_many(wanted)
    summary.resolved = sum(1 for version in latest.values() if version)

    updated: dict[str, VersionInfo] = {}
    for path, manifest, current in manifests:
        infos = [
            build_version_info(name, current[name], latest.get(name))
            for name in candidates
            if name in current
        ]
        if apply_version_updates(manifest, infos):
            write_json(manifest, path)
            summary.files_updated.append(path.relative_to(root).as_posix())
            for info in infos:
                if info.updated:
                    updated.setdefault(info.name, info)

    summary.updates = [updated[name] for name in candidates if name in updated]
    return summary
