"""Resolved configuration for one run of the tool, plus logging and cleanup."""

import atexit
import functools
import logging
import shutil
import signal
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .errors import ConfigurationError
from .hooks import HookSet, load_hooks
from .ignore import IGNORE_FILE_NAME
from .render import default_render_settings, render_document

APP_NAME = "host-mdx"
DEFAULT_PORT = 3000
TEMP_HTML_DIR = Path(tempfile.gettempdir()) / APP_NAME

logger = logging.getLogger("hostmdx")


def configure_logging(verbose=False, stream=None):
    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        logging.Formatter(f"[{APP_NAME} %(asctime)s] %(message)s")
    )
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


def log(message, verbose_only=False):
    logger.log(logging.DEBUG if verbose_only else logging.INFO, message)


@dataclass(frozen=True)
class BuildSession:
    input_root: Path
    output_root: Path
    output_generated: bool = False
    hooks: HookSet = field(default_factory=HookSet)
    render_settings: dict = field(default_factory=default_render_settings)
    render: Callable = None
    verbose: bool = False

    def __post_init__(self):
        if self.render is None:
            object.__setattr__(
                self,
                "render",
                functools.partial(render_document, settings=self.render_settings),
            )

    @property
    def ignore_file(self):
        return self.input_root / IGNORE_FILE_NAME


def create_temp_dir():
    TEMP_HTML_DIR.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix="html-", dir=TEMP_HTML_DIR))


def validate_port(port):
    try:
        port = int(port)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid port {port!r}") from None
    if not 0 < port < 65536:
        raise ConfigurationError(f"Invalid port {port}")
    return port


def create_session(input_path=None, output_path=None, verbose=False):
    """Validate paths and build the immutable session.

    Nothing is written to disk until every check has passed.
    """
    input_root = Path(input_path if input_path is not None else ".").resolve()
    if not input_root.is_dir():
        raise ConfigurationError(f'Invalid input path "{input_path}"')
    if output_path is not None:
        output_root = Path(output_path).resolve()
        if not output_root.is_dir():
            raise ConfigurationError(f'Invalid output path "{output_path}"')
        if output_root == input_root or input_root in output_root.parents:
            raise ConfigurationError(
                f'Output path "{output_path}" must not be inside input path'
                f' "{input_path}"'
            )
    hooks = load_hooks(input_root)
    settings = hooks.mod_render_settings(default_render_settings())
    if settings is None:
        raise ConfigurationError("mod_render_settings must return the settings")
    generated = output_path is None
    if generated:
        output_root = create_temp_dir()
    return BuildSession(
        input_root=input_root,
        output_root=output_root,
        output_generated=generated,
        hooks=hooks,
        render_settings=settings,
        verbose=verbose,
    )


def remove_generated_output(session):
    """Delete the output tree only when this process created it."""
    if session.output_generated and session.output_root.exists():
        shutil.rmtree(session.output_root, ignore_errors=True)


def _exit_on_signal(signum, frame):
    raise SystemExit(128 + signum)


def install_cleanup(session):
    # SIGTERM is turned into SystemExit so atexit handlers run; SIGINT already
    # arrives as KeyboardInterrupt.
    atexit.register(remove_generated_output, session)
    signal.signal(signal.SIGTERM, _exit_on_signal)
