from __future__ import annotations
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    root: Path = Field(default=Path("."), alias="NEPTUNE_ROOT")
    server_dir: Path = Field(default=Path("server"), alias="NEPTUNE_SERVER_DIR")
    gamemode_dir: Path = Field(default=Path("gamemode"), alias="NEPTUNE_GAMEMODE_DIR")
    plugins_dir: Path = Field(default=Path("plugins"), alias="NEPTUNE_PLUGINS_DIR")
    realm_dir: Path = Field(default=Path("realm"), alias="NEPTUNE_REALM_DIR")
    output_dir: Path = Field(default=Path("out"), alias="NEPTUNE_OUTPUT_DIR")
    logs_dir: Path = Field(default=Path("logs"), alias="NEPTUNE_LOGS_DIR")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    refresh_interval: float = Field(default=10.0, gt=0, alias="NEPTUNE_REFRESH_INTERVAL")
    restart_countdown: int = Field(default=3, ge=0, alias="NEPTUNE_RESTART_COUNTDOWN")
    launch_script: str = Field(default="start.sh", alias="NEPTUNE_LAUNCH_SCRIPT")
    shell: str = Field(default="sh", alias="NEPTUNE_SHELL")

    model_config = SettingsConfigDict(extra="ignore")

    def resolve(self, path: Path) -> Path:
        """Anchor a configured directory at `root` unless it is already absolute."""
        return path if path.is_absolute() else self.root / path
