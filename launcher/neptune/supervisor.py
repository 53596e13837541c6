"""
supervisor.py — Keeps an assembled realm running
------------------------------------------------
Foreground loop (one iteration):

    IDLE -> BUILDING    try the rebuild lock; if busy, warn and skip to RESTARTING
    BUILDING -> LAUNCHING  build, sync into the run directory, rewrite start script
    LAUNCHING -> RUNNING   spawn the start script, block until it exits
    RUNNING -> RESTARTING  fixed countdown, then back to IDLE

A background refresher thread repeats the build-and-sync every
`refresh_interval` seconds so content edits reach a running server
without a restart. It never waits for the lock: a busy lock skips the tick.

The run directory itself is not guarded: a server reading its plugins/
folder while a sync is copying can see it half-written.
"""

from __future__ import annotations
import threading
import time
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional
from .builder import PLUGINS_SUBDIR, SERVER_ARTIFACT, generate_realm
from .errors import SupervisorError
from .fs_layout import build_layout
from .fsutil import merge_contents, purge_suffix
from .plugins import ARTIFACT_SUFFIX
from .process_runner import ProcessRunner
from .settings import Settings
from .substitution import SERVER_JAR_KEY, substitute_file
from .logging_setup import get_logger

log = get_logger("neptune.supervisor")


class SupervisorState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    LAUNCHING = "launching"
    RUNNING = "running"
    RESTARTING = "restarting"


class RebuildLock:
    """At most one rebuild in flight. Acquisition never blocks."""

    def __init__(self):
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @property
    def held(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def attempt(self) -> Iterator[bool]:
        acquired = self.try_acquire()
        try:
            yield acquired
        finally:
            if acquired:
                self.release()


# shared by the supervisor, its refresher and the HTTP API
REBUILD_LOCK = RebuildLock()


def sync_run_dir(output: Path, run_dir: Path, launch_script: str = "start.sh") -> Path:
    """
    Mirror a build output into the run directory and point the launch
    script at the run directory's server artifact. Returns the script path.

    Plugin artifacts already in the run directory are deleted first so a
    plugin dropped from the gamemode disappears here too.
    """
    plugins = run_dir / PLUGINS_SUBDIR
    plugins.mkdir(parents=True, exist_ok=True)
    purge_suffix(plugins, ARTIFACT_SUFFIX)
    merge_contents(output, run_dir)

    run_full = run_dir.resolve()
    script = run_full / launch_script
    if not script.is_file():
        raise SupervisorError(f"launch script not found in run directory: {script}")
    substitute_file(script, {SERVER_JAR_KEY: str(run_full / SERVER_ARTIFACT)})
    log.info("Synchronized %s -> %s", output, run_full)
    return script


class BackgroundRefresher(threading.Thread):
    def __init__(self, rebuild: Callable[[], Optional[Path]], interval: float):
        super().__init__(name="neptune-refresher", daemon=True)
        self._rebuild = rebuild
        self.interval = interval
        self._stop_event = threading.Event()
        self.failure: Optional[BaseException] = None
        self.ticks = 0
        self.skipped = 0

    def tick(self) -> bool:
        """One refresh attempt. False when a rebuild was already in flight."""
        self.ticks += 1
        if self._rebuild() is None:
            self.skipped += 1
            log.debug("Rebuild in progress, skipping background refresh")
            return False
        return True

    def run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.tick()
            except Exception as e:
                log.exception("Background rebuild failed, refresher stopped: %s", e)
                self.failure = e
                return

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self.is_alive() and threading.current_thread() is not self:
            self.join(timeout)


class RunSupervisor:
    def __init__(self, settings: Settings, realm_id: str, run_dir: Path, *,
                 lock: Optional[RebuildLock] = None,
                 runner: Optional[ProcessRunner] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.settings = settings
        self.layout = build_layout(settings)
        self.realm_id = realm_id
        self.run_dir = Path(run_dir)
        self.lock = lock or REBUILD_LOCK
        self.runner = runner or ProcessRunner()
        self._sleep = sleep
        self.state = SupervisorState.IDLE
        self.refresher: Optional[BackgroundRefresher] = None

    def prepare(self) -> None:
        (self.run_dir / PLUGINS_SUBDIR).mkdir(parents=True, exist_ok=True)

    def rebuild_and_sync(self) -> Path:
        """Caller must hold the rebuild lock."""
        output = generate_realm(self.layout, self.realm_id)
        return sync_run_dir(output, self.run_dir, self.settings.launch_script)

    def try_rebuild(self) -> Optional[Path]:
        with self.lock.attempt() as acquired:
            if not acquired:
                return None
            return self.rebuild_and_sync()

    def start_refresher(self) -> BackgroundRefresher:
        if self.refresher is None:
            self.refresher = BackgroundRefresher(self.try_rebuild, self.settings.refresh_interval)
            self.refresher.start()
        return self.refresher

    def _check_refresher(self) -> None:
        if self.refresher is not None and self.refresher.failure is not None:
            raise self.refresher.failure

    def run_once(self) -> Optional[int]:
        """One supervisor iteration. Returns the server's exit code, or None if skipped."""
        self._check_refresher()
        rc: Optional[int] = None

        self.state = SupervisorState.BUILDING
        script = self.try_rebuild()
        if script is None:
            log.warning("!!! Files were being generated, trying again.")
        else:
            self.state = SupervisorState.LAUNCHING
            log.info("Files ready! Starting server...")
            handle = self.runner.start("server", [self.settings.shell, str(script)], cwd=script.parent)
            self.state = SupervisorState.RUNNING
            rc = handle.wait()
            log.info("Server exited with rc=%s", rc)

        self.state = SupervisorState.RESTARTING
        self.countdown()
        self.state = SupervisorState.IDLE
        return rc

    def countdown(self) -> None:
        for t in range(self.settings.restart_countdown, 0, -1):
            log.info("Server restarting in %d seconds...", t)
            self._sleep(1)

    def run_forever(self) -> None:
        self.prepare()
        self.start_refresher()
        try:
            while True:
                self.run_once()
        finally:
            self.stop()

    def stop(self) -> None:
        if self.refresher is not None:
            self.refresher.stop(timeout=5.0)
        self.runner.stop_all()
