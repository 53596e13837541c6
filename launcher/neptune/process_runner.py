from __future__ import annotations
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from .logging_setup import get_logger

log = get_logger("neptune.proc")

@dataclass
class ProcessHandle:
    name: str
    proc: subprocess.Popen

    def wait(self) -> int:
        return self.proc.wait()

class ProcessRunner:
    """Spawns child processes attached to this process's stdin/stdout/stderr."""

    def __init__(self):
        self.handles: List[ProcessHandle] = []

    def start(self, name: str, cmd: List[str], *, cwd: Optional[Path] = None,
              env: Optional[dict] = None) -> ProcessHandle:
        log.info("Starting %s: %s", name, " ".join(cmd))
        proc = subprocess.Popen(cmd, cwd=str(cwd) if cwd else None, env=env)
        h = ProcessHandle(name=name, proc=proc)
        self.handles = [x for x in self.handles if x.proc.poll() is None]
        self.handles.append(h)
        return h

    def stop_all(self, timeout: float = 10.0) -> None:
        for h in self.handles:
            if h.proc.poll() is None:
                log.info("Stopping %s (pid=%s)", h.name, h.proc.pid)
                h.proc.terminate()
        for h in self.handles:
            if h.proc.poll() is None:
                try:
                    h.proc.wait(timeout=timeout)
                except subprocess.TimeoutExpired:
                    log.warning("Killing %s (pid=%s)", h.name, h.proc.pid)
                    h.proc.kill()
