"""``host-mdx`` entry point: build the site once, or build, serve and watch."""

import argparse
import sys
import threading

from .command_registry import add_commands, find_command, register_command
from .errors import ConfigurationError, HostMdxError
from .ports import PORT_SEARCH_SPAN, find_port
from .rebuild import RebuildCoordinator
from .session import (
    DEFAULT_PORT,
    configure_logging,
    create_session,
    install_cleanup,
    log,
    validate_port,
)

DEFAULT_COMMAND = "serve"

_PATH_HELP = {
    "input_path": "The path at which all mdx files are stored",
    "output_path": (
        "The path to which all html files will be generated (defaults to a"
        " temporary directory that is removed on exit)"
    ),
    "verbose": "Shows additional log messages",
}


def _initial_build(session):
    coordinator = RebuildCoordinator(session)
    coordinator.request_build()
    coordinator.wait_idle()
    return coordinator


@register_command(
    "Only create the html website from mdx, do not host",
    option_help=_PATH_HELP,
    short_flags={"verbose": "-v"},
)
def build(input_path=".", output_path=None, verbose=False):
    configure_logging(verbose)
    session = create_session(input_path, output_path, verbose)
    install_cleanup(session)
    coordinator = _initial_build(session)
    if not coordinator.last_result.ok:
        return 1
    return 0


@register_command(
    "Create the html website and host it on localhost",
    option_help=dict(
        _PATH_HELP,
        port="Localhost port number on which to host",
        track_changes="Tracks any changes made & auto reloads",
    ),
    short_flags={"verbose": "-v", "track_changes": "-t"},
)
def serve(
    input_path=".",
    output_path=None,
    port=DEFAULT_PORT,
    track_changes=False,
    verbose=False,
):
    # imported here so `build` works where the server stack is unavailable
    from .dev_server import serve as start_server
    from .triggers import KeyListener, start_watching

    configure_logging(verbose)
    port = validate_port(port)
    session = create_session(input_path, output_path, verbose)
    install_cleanup(session)
    coordinator = _initial_build(session)

    free_port = find_port(port, min(port + PORT_SEARCH_SPAN, 65535))
    if free_port is None:
        raise HostMdxError(f"No free port between {port} and {port + PORT_SEARCH_SPAN}")
    if free_port != port:
        log(f"Port {port} is busy, using {free_port}")
    server = start_server(session.output_root, free_port, session.hooks)

    stop = threading.Event()
    keys = KeyListener(coordinator.request_build, stop.set)
    observer = None
    try:
        keys.start()
        if track_changes:
            observer = start_watching(session, coordinator)
        stop.wait()
    except KeyboardInterrupt:
        pass
    finally:
        keys.stop()
        if observer is not None:
            observer.stop()
            observer.join()
        server.close()
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="host-mdx",
        description="Create and host a website from mdx files",
    )
    add_commands(parser.add_subparsers(dest="command"))
    return parser


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)
    if not argv or (argv[0].startswith("-") and argv[0] not in ("-h", "--help")):
        argv.insert(0, DEFAULT_COMMAND)
    parser = build_parser()
    args = parser.parse_args(argv)
    command = find_command(args.command)
    try:
        return command.run(args)
    except ConfigurationError as exc:
        log(str(exc))
        return 1
    except HostMdxError as exc:
        log(str(exc))
        return 2


if __name__ == "__main__":
    sys.exit(main())
