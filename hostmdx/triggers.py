"""Things that ask for a rebuild: file changes and key presses."""

import os
import select
import sys
import termios
import threading

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .session import log

REBUILD_KEY = b"r"
INTERRUPT_KEY = b"\x03"
# opened/closed events fire when the builder reads inputs and must not count
CHANGE_EVENT_TYPES = ("created", "modified", "deleted", "moved")


class ChangeHandler(FileSystemEventHandler):
    def __init__(self, coordinator):
        self.coordinator = coordinator

    def on_any_event(self, event):
        if event.event_type not in CHANGE_EVENT_TYPES:
            return
        log(f"Change detected: {event.event_type} {event.src_path}", True)
        self.coordinator.request_build()


def start_watching(session, coordinator, observer_factory=Observer):
    observer = observer_factory()
    observer.schedule(
        ChangeHandler(coordinator), str(session.input_root), recursive=True
    )
    observer.start()
    return observer


class KeyListener:
    """Read single key presses from stdin on a background thread.

    When stdin is a terminal it is switched to keypress mode (no line
    buffering, no echo, Ctrl+C delivered as a byte) until :meth:`stop`.
    """

    def __init__(self, on_rebuild, on_interrupt, stdin=None, poll_interval=0.2):
        self.on_rebuild = on_rebuild
        self.on_interrupt = on_interrupt
        self.stdin = stdin if stdin is not None else sys.stdin
        self.poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread = None
        self._saved_tty_state = None
        self._fd = None

    def handle_key(self, key):
        if key == REBUILD_KEY:
            self.on_rebuild()
        elif key == INTERRUPT_KEY:
            self.on_interrupt()

    def _enable_keypress_mode(self):
        if not os.isatty(self._fd):
            return
        self._saved_tty_state = termios.tcgetattr(self._fd)
        mode = termios.tcgetattr(self._fd)
        mode[3] &= ~(termios.ICANON | termios.ECHO | termios.ISIG)
        mode[6][termios.VMIN] = 1
        mode[6][termios.VTIME] = 0
        termios.tcsetattr(self._fd, termios.TCSAFLUSH, mode)

    def _restore(self):
        if self._saved_tty_state is not None:
            termios.tcsetattr(self._fd, termios.TCSAFLUSH, self._saved_tty_state)
            self._saved_tty_state = None

    def _read_loop(self):
        while not self._stop.is_set():
            ready, _, _ = select.select([self._fd], [], [], self.poll_interval)
            if not ready:
                continue
            key = os.read(self._fd, 1)
            if not key:
                # stdin closed
                return
            self.handle_key(key)

    def start(self):
        try:
            self._fd = self.stdin.fileno()
        except (AttributeError, OSError, ValueError):
            log("stdin is not readable, key controls disabled", True)
            return
        self._enable_keypress_mode()
        self._thread = threading.Thread(
            target=self._read_loop, name="hostmdx-keys", daemon=True
        )
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
        self._restore()
