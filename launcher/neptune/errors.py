from __future__ import annotations
from pathlib import Path
from typing import Sequence


class NeptuneError(RuntimeError):
    """Base class for every failure the build and run commands report."""


class ConfigurationError(NeptuneError):
    def __init__(self, path: Path, message: str):
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")


class ResolutionError(NeptuneError):
    pass


class PluginNotFound(ResolutionError):
    def __init__(self, plugin_name: str, searched: Sequence[Path] = ()):
        self.plugin_name = plugin_name
        self.searched = [Path(p) for p in searched]
        super().__init__(f"couldn't find suitable plugin {plugin_name}")


class BuildError(NeptuneError):
    def __init__(self, step: str, path: Path, message: str = ""):
        self.step = step
        self.path = Path(path)
        detail = f": {message}" if message else ""
        super().__init__(f"{step} failed for {self.path}{detail}")


class SupervisorError(NeptuneError):
    pass
