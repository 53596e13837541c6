"""
Versioned plugin resolution.

Plugins live under a search root split into version tiers plus an
unscoped catch-all tier::

    plugins/
    ├── 1.20/
    │   ├── Essentials.jar
    │   └── Essentials/        (optional companion data folder)
    ├── 1.19/
    │   └── ...
    └── WorldEdit.jar          (unscoped)

Candidates are tried in order: primary version, each backup version in
listed order, then the unscoped tier. Version strings are opaque path
segments; no version comparison happens here.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence
from .errors import PluginNotFound
from .logging_setup import get_logger

log = get_logger("neptune.plugins")

ARTIFACT_SUFFIX = ".jar"
UNSCOPED = None


@dataclass(frozen=True)
class PluginPlacement:
    name: str
    artifact: Path
    companion: Optional[Path]
    version: Optional[str]  # None: unscoped tier

    @property
    def tier(self) -> str:
        return self.version if self.version is not None else "unscoped"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "artifact": str(self.artifact),
            "companion": str(self.companion) if self.companion else None,
            "tier": self.tier,
        }


def artifact_name(plugin_name: str) -> str:
    return f"{plugin_name}{ARTIFACT_SUFFIX}"


def _candidate(tier_dir: Path, plugin_name: str) -> tuple[Path, Optional[Path]]:
    folder = tier_dir / plugin_name
    return tier_dir / artifact_name(plugin_name), (folder if folder.is_dir() else None)


def search_paths(plugin_name: str, version: str, backup_versions: Sequence[str], search_root: Path) -> List[Path]:
    """Every artifact path `resolve` would test, in the order it tests them."""
    tiers = [search_root / v for v in [version, *backup_versions]]
    return [t / artifact_name(plugin_name) for t in tiers] + [search_root / artifact_name(plugin_name)]


def resolve(plugin_name: str, version: str, backup_versions: Sequence[str], search_root: Path) -> PluginPlacement:
    for v in [version, *backup_versions]:
        artifact, companion = _candidate(search_root / v, plugin_name)
        if artifact.is_file():
            log.debug("Resolved plugin %s from tier %s: %s", plugin_name, v, artifact)
            return PluginPlacement(plugin_name, artifact, companion, v)

    artifact, companion = _candidate(search_root, plugin_name)
    if artifact.is_file():
        log.debug("Resolved plugin %s from unscoped tier: %s", plugin_name, artifact)
        return PluginPlacement(plugin_name, artifact, companion, UNSCOPED)

    raise PluginNotFound(plugin_name, search_paths(plugin_name, version, backup_versions, search_root))


class PluginResolver:
    """Binds a search root; resolution is never cached across calls."""

    def __init__(self, search_root: Path):
        self.search_root = Path(search_root)

    def resolve(self, plugin_name: str, version: str, backup_versions: Sequence[str] = ()) -> PluginPlacement:
        return resolve(plugin_name, version, backup_versions, self.search_root)

    def resolve_all(self, plugin_names: Sequence[str], version: str,
                    backup_versions: Sequence[str] = ()) -> List[PluginPlacement]:
        return [self.resolve(name, version, backup_versions) for name in plugin_names]
