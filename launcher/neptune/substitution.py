"""
Placeholder substitution over an assembled server tree.

Text-like files have every `$$REALM_<KEY>$$` token replaced by the value
of KEY in the replacement namespace. Replacement is literal: no escaping,
no recursive expansion.
"""

from __future__ import annotations
import os
import re
from pathlib import Path
from typing import Dict, Iterable, Mapping, Union
from .models import Realm
from .logging_setup import get_logger

log = get_logger("neptune.subst")

TOKEN_PREFIX = "$$REALM_"
TOKEN_SUFFIX = "$$"

# filled in per run directory by the supervisor, never from descriptor attributes
SERVER_JAR_KEY = "SERVER_JAR"
RESERVED_KEYS = frozenset({SERVER_JAR_KEY})

TEXT_EXTENSIONS = frozenset({
    ".yml", ".yaml", ".json", ".toml", ".properties",
    ".conf", ".cfg", ".ini", ".txt", ".sh",
})


def normalize_key(key: str) -> str:
    return key.replace("-", "_").upper()


def token(key: str) -> str:
    return f"{TOKEN_PREFIX}{normalize_key(key)}{TOKEN_SUFFIX}"


def build_namespace(*layers: Mapping[str, str]) -> Dict[str, str]:
    """Merge layers lowest precedence first; colliding normalized keys: last wins.

    Reserved keys are dropped so their tokens survive the build pass.
    """
    merged: Dict[str, str] = {}
    for layer in layers:
        for key, value in layer.items():
            norm = normalize_key(key)
            if norm in RESERVED_KEYS:
                log.warning("Ignoring reserved replacement key %r", key)
                continue
            merged[norm] = value
    return merged


def realm_namespace(realm: Realm) -> Dict[str, str]:
    return build_namespace(realm.gamemode.replacements(), realm.replacements())


def is_text_file(path: Path) -> bool:
    return path.suffix.lower() in TEXT_EXTENSIONS


class Replacer:
    """Token table and its compiled pattern, built once per namespace.

    Single pass: a value that itself looks like a token is not expanded again.
    """

    def __init__(self, namespace: Mapping[str, str]):
        self.table = {token(k): v for k, v in namespace.items()}
        self.pattern = None
        if self.table:
            self.pattern = re.compile("|".join(re.escape(t) for t in sorted(self.table, key=len, reverse=True)))

    def __call__(self, text: str) -> str:
        if self.pattern is None:
            return text
        return self.pattern.sub(lambda m: self.table[m.group(0)], text)


def apply(text: str, namespace: Mapping[str, str]) -> str:
    return Replacer(namespace)(text)


def substitute_file(path: Path, namespace: Union[Mapping[str, str], Replacer]) -> bool:
    """Rewrite one file in place. Returns True if its contents changed."""
    replacer = namespace if isinstance(namespace, Replacer) else Replacer(namespace)
    # surrogateescape keeps undecodable bytes intact through the round trip
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as fh:
        original = fh.read()
    rewritten = replacer(original)
    if rewritten == original:
        return False
    with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as fh:
        fh.write(rewritten)
    return True


def iter_text_files(root: Path) -> Iterable[Path]:
    for dirpath, _, files in os.walk(root):
        for fn in sorted(files):
            p = Path(dirpath) / fn
            if is_text_file(p):
                yield p


def substitute(root: Path, namespace: Mapping[str, str]) -> int:
    replacer = Replacer(namespace)
    changed = 0
    for p in iter_text_files(root):
        if substitute_file(p, replacer):
            changed += 1
            log.debug("Substituted placeholders in %s", p)
    log.info("Placeholder pass over %s: %d file(s) rewritten", root, changed)
    return changed
