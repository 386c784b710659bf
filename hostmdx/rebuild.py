"""Serializes site builds and coalesces overlapping rebuild requests."""

import threading
import traceback

from .errors import HostMdxError
from .session import log
from .site_builder import BuildResult, build_site


class RebuildCoordinator:
    """Runs at most one build at a time.

    A request that arrives while a build is running only marks a rerun as
    pending; any number of such requests collapse into a single extra build
    that starts as soon as the current one finishes.
    """

    def __init__(self, session, builder=build_site):
        self.session = session
        self.builder = builder
        self.builds_started = 0
        self.last_result = None
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._in_progress = False
        self._pending_rerun = False
        self._worker = None

    @property
    def is_building(self):
        with self._lock:
            return self._in_progress

    def rerun_requested(self):
        with self._lock:
            return self._pending_rerun

    def request_build(self):
        """Start a build, or queue one rerun if a build is in flight.

        Returns True when this call started a new build.
        """
        with self._lock:
            if self._in_progress:
                if not self._pending_rerun:
                    log("site creation already ongoing, queued a rebuild", True)
                self._pending_rerun = True
                return False
            self._in_progress = True
            self._pending_rerun = False
            self._worker = threading.Thread(
                target=self._run, name="hostmdx-build", daemon=True
            )
            self._worker.start()
        return True

    def wait_idle(self, timeout=None):
        """Block until no build is running; False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: not self._in_progress, timeout)

    def _build_once(self):
        with self._lock:
            self.builds_started += 1
        try:
            return self.builder(self.session, should_abandon=self.rerun_requested)
        except Exception as exc:
            if isinstance(exc, HostMdxError):
                log(str(exc))
            else:
                log(f"{type(exc).__name__}: {exc}")
            log(traceback.format_exc(), verbose_only=True)
            log("Failed to create site!")
            return BuildResult(ok=False, errors=[exc])

    def _run(self):
        while True:
            result = self._build_once()
            with self._lock:
                self.last_result = result
                if self._pending_rerun:
                    self._pending_rerun = False
                    continue
                self._in_progress = False
                self._idle.notify_all()
                return
