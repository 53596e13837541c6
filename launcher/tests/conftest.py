"""
Shared fixtures: a miniature content repository.

    server/paper/        paper.jar, server.properties, start.sh
    gamemode/skyblock.yml
    plugins/1.19/        Essentials.jar + Essentials/ data folder
    plugins/             WorldEdit.jar (unscoped)
    realm/survival.yml
"""

from pathlib import Path

import pytest

from neptune.fs_layout import build_layout
from neptune.settings import Settings


def write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


SKYBLOCK_YML = """\
name: Skyblock
server: paper
version: 1.20
backup-versions:
  - 1.19
plugins:
  - Essentials
  - WorldEdit
attributes:
  max-players: 20
  motd: Welcome to skyblock
"""

SURVIVAL_YML = """\
name: Survival
gamemode: skyblock
attributes:
  difficulty: hard
"""


@pytest.fixture
def content_root(tmp_path):
    root = tmp_path / "content"
    write(root / "server" / "paper" / "paper.jar", "PAPER-BINARY")
    write(root / "server" / "paper" / "server.properties",
          "motd=$$REALM_GAMEMODE_MOTD$$\nmax-players=$$REALM_GAMEMODE_MAX_PLAYERS$$\n"
          "level-name=$$REALM_ID$$\ndifficulty=$$REALM_DIFFICULTY$$\n")
    write(root / "server" / "paper" / "start.sh", "#!/bin/sh\njava -jar $$REALM_SERVER_JAR$$ nogui\n")
    write(root / "gamemode" / "skyblock.yml", SKYBLOCK_YML)
    write(root / "plugins" / "1.19" / "Essentials.jar", "ESSENTIALS-1.19")
    write(root / "plugins" / "1.19" / "Essentials" / "config.yml", "server-name: $$REALM_NAME$$\n")
    write(root / "plugins" / "WorldEdit.jar", "WORLDEDIT-UNSCOPED")
    write(root / "realm" / "survival.yml", SURVIVAL_YML)
    return root


@pytest.fixture
def settings(content_root):
    return Settings(NEPTUNE_ROOT=content_root, NEPTUNE_REFRESH_INTERVAL=0.01, NEPTUNE_RESTART_COUNTDOWN=3)


@pytest.fixture
def layout(settings):
    return build_layout(settings)
