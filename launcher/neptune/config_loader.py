from __future__ import annotations
from pathlib import Path
from typing import Any, Dict
import yaml
from pydantic import ValidationError
from .errors import ConfigurationError
from .fs_layout import Layout
from .models import GameMode, Realm
from .logging_setup import get_logger

log = get_logger("neptune.config")

_TEXT_TAGS = {
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:timestamp",
}

class _TextLoader(yaml.SafeLoader):
    """SafeLoader that keeps numbers, booleans and dates as their source text.

    Versions such as `1.20` must stay `"1.20"`: they name directories.
    """

_TextLoader.yaml_implicit_resolvers = {
    first: [(tag, rx) for tag, rx in resolvers if tag not in _TEXT_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise ConfigurationError(path, "file not found")
    try:
        text = path.read_text(encoding="utf-8")
        data = next(iter(yaml.load_all(text, Loader=_TextLoader)), None)
    except yaml.YAMLError as e:
        raise ConfigurationError(path, f"couldn't parse yaml file: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(path, f"couldn't read file: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(path, "document root must be a mapping")
    return data

def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        if err.get("type") == "missing":
            parts.append(f"missing required field '{field}'")
        else:
            parts.append(f"invalid field '{field}': {err.get('msg')}")
    return "; ".join(parts)

def load_gamemode(layout: Layout, gamemode_id: str) -> GameMode:
    path = layout.gamemode_config(gamemode_id)
    data = load_yaml(path)
    try:
        gm = GameMode.model_validate({**data, "id": gamemode_id})
    except ValidationError as e:
        raise ConfigurationError(path, _describe(e)) from e
    log.debug("Loaded gamemode %s (server=%s version=%s plugins=%d)", gm.id, gm.server, gm.version, len(gm.plugins))
    return gm

def load_realm(layout: Layout, realm_id: str) -> Realm:
    path = layout.realm_config(realm_id)
    data = load_yaml(path)
    gamemode_id = data.get("gamemode")
    if gamemode_id is None:
        raise ConfigurationError(path, "missing required field 'gamemode'")
    if not isinstance(gamemode_id, str) or not gamemode_id.strip():
        raise ConfigurationError(path, "invalid field 'gamemode': expected a gamemode id")

    gamemode = load_gamemode(layout, gamemode_id)
    try:
        fields = {k: data[k] for k in ("name", "attributes") if k in data}
        realm = Realm.model_validate({"id": realm_id, "gamemode": gamemode, **fields})
    except ValidationError as e:
        raise ConfigurationError(path, _describe(e)) from e
    log.info("Loaded realm %s (%s) on gamemode %s", realm.id, realm.name, gamemode.id)
    return realm
