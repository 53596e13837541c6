from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from .settings import Settings

CONFIG_SUFFIX = ".yml"

@dataclass(frozen=True)
class Layout:
    servers: Path
    gamemodes: Path
    plugins: Path
    realms: Path
    output: Path

    def server_package(self, server: str) -> Path:
        return self.servers / server

    def gamemode_config(self, gamemode_id: str) -> Path:
        return self.gamemodes / f"{gamemode_id}{CONFIG_SUFFIX}"

    def gamemode_overlay(self, gamemode_id: str) -> Path:
        return self.gamemodes / gamemode_id

    def realm_config(self, realm_id: str) -> Path:
        return self.realms / f"{realm_id}{CONFIG_SUFFIX}"

    def realm_overlay(self, realm_id: str) -> Path:
        return self.realms / realm_id

    def realm_output(self, realm_id: str) -> Path:
        return self.output / realm_id

def build_layout(settings: Settings) -> Layout:
    return Layout(
        servers=settings.resolve(settings.server_dir),
        gamemodes=settings.resolve(settings.gamemode_dir),
        plugins=settings.resolve(settings.plugins_dir),
        realms=settings.resolve(settings.realm_dir),
        output=settings.resolve(settings.output_dir),
    )

def ensure_dirs(layout: Layout) -> None:
    layout.output.mkdir(parents=True, exist_ok=True)
