from __future__ import annotations
from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"expected a scalar value, got {type(value).__name__}")


def _string_map(value: Any) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("expected a mapping of attribute names to values")
    return {_scalar_text(k): _scalar_text(v) for k, v in value.items()}


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise ValueError("expected a list")
    return [_scalar_text(v) for v in value]


class GameMode(BaseModel):
    """
    A gamemode: which server package to start from, which version to
    resolve plugins against, which plugins to install, plus free-form
    attributes exposed to text files as `gamemode_<key>` replacements.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    server: str
    version: str
    backup_versions: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("backup-versions", "backup_versions"),
    )
    plugins: List[str] = Field(default_factory=list)
    attributes: Dict[str, str] = Field(default_factory=dict)

    @field_validator("name", "server", "version", mode="before")
    @classmethod
    def _scalar(cls, v: Any) -> str:
        return _scalar_text(v)

    @field_validator("backup_versions", "plugins", mode="before")
    @classmethod
    def _list(cls, v: Any) -> List[str]:
        return _string_list(v)

    @field_validator("attributes", mode="before")
    @classmethod
    def _attrs(cls, v: Any) -> Dict[str, str]:
        return _string_map(v)

    @property
    def versions(self) -> List[str]:
        """Primary version first, then backups in listed order."""
        return [self.version, *self.backup_versions]

    def replacements(self) -> Dict[str, str]:
        out = {
            "gamemode_id": self.id,
            "gamemode_name": self.name,
            "gamemode_server": self.server,
            "gamemode_version": self.version,
        }
        for key, value in self.attributes.items():
            out[f"gamemode_{key}"] = value
        return out


class Realm(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    gamemode: GameMode
    attributes: Dict[str, str] = Field(default_factory=dict)

    @field_validator("name", mode="before")
    @classmethod
    def _scalar(cls, v: Any) -> str:
        return _scalar_text(v)

    @field_validator("attributes", mode="before")
    @classmethod
    def _attrs(cls, v: Any) -> Dict[str, str]:
        return _string_map(v)

    def replacements(self) -> Dict[str, str]:
        # realm attributes last: they shadow the identity keys
        out = {"id": self.id, "name": self.name}
        out.update(self.attributes)
        return out
