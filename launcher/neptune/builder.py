"""
builder.py — Assembles one realm's server tree
----------------------------------------------
Composition order (later steps win file-for-file):

    1. output directory + plugins/ (stale plugin artifacts purged)
    2. server package, primary artifact renamed to server.jar
    3. resolved plugins (+ companion folders) into plugins/
    4. gamemode overlay (optional)
    5. realm overlay (optional)
    6. placeholder substitution over the whole tree
    7. eula.txt

Any I/O failure aborts the build with BuildError; there is no partial
success.
"""

from __future__ import annotations
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List
from .errors import BuildError, PluginNotFound
from .fs_layout import Layout
from .fsutil import copy_file, merge_contents, merge_tree, purge_suffix
from .models import GameMode, Realm
from .planner import Plan, PlanAction
from .plugins import ARTIFACT_SUFFIX, PluginPlacement, PluginResolver, artifact_name
from .substitution import realm_namespace, substitute, token
from .config_loader import load_realm
from .logging_setup import get_logger

log = get_logger("neptune.build")

SERVER_ARTIFACT = "server" + ARTIFACT_SUFFIX
PLUGINS_SUBDIR = "plugins"
EULA_FILE = "eula.txt"
EULA_TEXT = "eula=true\n"


@contextmanager
def _step(step: str, path: Path) -> Iterator[None]:
    try:
        yield
    except OSError as e:
        raise BuildError(step, path, str(e)) from e


class RealmBuilder:
    def __init__(self, layout: Layout):
        self.layout = layout
        self.resolver = PluginResolver(layout.plugins)

    def output_dir(self, realm: Realm) -> Path:
        return self.layout.realm_output(realm.id)

    def primary_artifact(self, gamemode: GameMode) -> Path:
        return self.layout.server_package(gamemode.server) / f"{gamemode.server}{ARTIFACT_SUFFIX}"

    # ---------------- Build ----------------
    def build(self, realm: Realm) -> Path:
        out = self.output_dir(realm)
        gm = realm.gamemode
        log.info("Building realm %s (gamemode=%s server=%s version=%s) into %s",
                 realm.id, gm.id, gm.server, gm.version, out)

        self.prepare_output(out)
        self.copy_server_files(gm, out)
        self.copy_plugins(gm, out)
        self.copy_overlay("gamemode overlay", self.layout.gamemode_overlay(gm.id), out)
        self.copy_overlay("realm overlay", self.layout.realm_overlay(realm.id), out)
        with _step("placeholder substitution", out):
            substitute(out, realm_namespace(realm))
        self.write_eula(out)

        log.info("Generated realm files for %s.", realm.id)
        return out

    def prepare_output(self, out: Path) -> None:
        plugins = out / PLUGINS_SUBDIR
        with _step("create output directory", plugins):
            plugins.mkdir(parents=True, exist_ok=True)
            purge_suffix(plugins, ARTIFACT_SUFFIX)

    def copy_server_files(self, gamemode: GameMode, out: Path) -> Path:
        package = self.layout.server_package(gamemode.server)
        primary = self.primary_artifact(gamemode)
        if not package.is_dir():
            raise BuildError("copy server package", package, "server package not found")
        if not primary.is_file():
            raise BuildError("copy server package", primary, "primary server artifact not found")

        with _step("copy server package", package):
            merge_contents(package, out)
            copied = out / primary.name
            canonical = out / SERVER_ARTIFACT
            if copied != canonical:
                os.replace(copied, canonical)
        log.info("Copied server package %s (%s -> %s)", gamemode.server, primary.name, SERVER_ARTIFACT)
        return canonical

    def copy_plugins(self, gamemode: GameMode, out: Path) -> List[PluginPlacement]:
        placements = self.resolver.resolve_all(gamemode.plugins, gamemode.version, gamemode.backup_versions)
        dest = out / PLUGINS_SUBDIR
        for p in placements:
            with _step(f"copy plugin {p.name}", p.artifact):
                copy_file(p.artifact, dest / artifact_name(p.name))
                if p.companion is not None:
                    merge_tree(p.companion, dest / p.companion.name)
            log.info("Installed plugin %s from tier %s%s", p.name, p.tier,
                     " (with data folder)" if p.companion else "")
        return placements

    def copy_overlay(self, label: str, overlay: Path, out: Path) -> bool:
        if not overlay.is_dir():
            log.debug("No %s at %s, skipping", label, overlay)
            return False
        with _step(f"copy {label}", overlay):
            merge_contents(overlay, out)
        log.info("Applied %s %s", label, overlay)
        return True

    def write_eula(self, out: Path) -> Path:
        path = out / EULA_FILE
        with _step("accept eula", path):
            path.write_text(EULA_TEXT, encoding="utf-8")
        return path

    # ---------------- Planning ----------------
    def plan(self, realm: Realm) -> Plan:
        """Describe what `build` would do without touching the filesystem."""
        gm = realm.gamemode
        out = self.output_dir(realm)
        plan = Plan(realm=realm.id)

        plan.add(PlanAction(
            action="prepare_output",
            target=realm.id,
            detail="Create output directory and purge stale plugin artifacts",
            paths={"dest": str(out)},
            will_change=not out.exists(),
        ))

        package = self.layout.server_package(gm.server)
        primary = self.primary_artifact(gm)
        ok = primary.is_file()
        plan.add(PlanAction(
            action="copy_server",
            target=gm.server,
            detail=f"Copy server package, rename {primary.name} -> {SERVER_ARTIFACT}" if ok
            else "Server package or its primary artifact is missing",
            paths={"src": str(package), "artifact": str(primary)},
            will_change=True,
            severity="info" if ok else "error",
        ))

        for name in gm.plugins:
            dest = out / PLUGINS_SUBDIR / artifact_name(name)
            try:
                p = self.resolver.resolve(name, gm.version, gm.backup_versions)
            except PluginNotFound as e:
                plan.add(PlanAction(
                    action="install_plugin",
                    target=name,
                    detail="No candidate in any tier",
                    paths={f"searched_{i}": str(s) for i, s in enumerate(e.searched)},
                    will_change=False,
                    severity="error",
                ))
                continue
            paths = {"src": str(p.artifact), "dest": str(dest)}
            if p.companion:
                paths["companion"] = str(p.companion)
            fallback = p.version != gm.version
            plan.add(PlanAction(
                action="install_plugin",
                target=name,
                detail=f"Resolved from tier {p.tier}",
                paths=paths,
                will_change=True,
                severity="warn" if fallback else "info",
            ))

        for label, overlay in (("gamemode", self.layout.gamemode_overlay(gm.id)),
                               ("realm", self.layout.realm_overlay(realm.id))):
            present = overlay.is_dir()
            plan.add(PlanAction(
                action=f"overlay_{label}",
                target=gm.id if label == "gamemode" else realm.id,
                detail="Merge overlay into output" if present else "No overlay directory, skipped",
                paths={"src": str(overlay)},
                will_change=present,
            ))

        namespace = realm_namespace(realm)
        plan.add(PlanAction(
            action="substitute",
            target=realm.id,
            detail=f"Replace {len(namespace)} placeholder token(s) in text files",
            paths={"root": str(out)},
            will_change=True,
        ))
        plan.notes.extend(f"{token(k)} = {v}" for k, v in namespace.items())

        plan.add(PlanAction(
            action="write_eula",
            target=realm.id,
            detail="Accept EULA",
            paths={"dest": str(out / EULA_FILE)},
            will_change=not (out / EULA_FILE).exists(),
        ))
        return plan


def generate_realm(layout: Layout, realm_id: str) -> Path:
    """Load a realm fresh from configuration and build it."""
    realm = load_realm(layout, realm_id)
    return RealmBuilder(layout).build(realm)
