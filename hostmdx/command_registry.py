"""Subcommands of ``host-mdx``, declared by decorating plain functions.

Every keyword parameter of a handler becomes a ``--long-option`` whose
default, type and help text come from the handler itself, so ``build`` and
``serve`` stay callable from Python with the same arguments the CLI accepts.
"""

import inspect
from dataclasses import dataclass, field


class CommandRegistrationError(Exception):
    """A handler could not be registered as a subcommand."""


@dataclass(frozen=True)
class Option:
    dest: str
    flags: tuple
    default: object = None
    help: str = None

    def add_to(self, parser):
        kwargs = {"dest": self.dest, "default": self.default}
        if self.help is not None:
            kwargs["help"] = self.help
        if isinstance(self.default, bool):
            # switches only turn a behavior on
            kwargs["action"] = "store_true"
        elif self.default is not None:
            kwargs["type"] = type(self.default)
        parser.add_argument(*self.flags, **kwargs)


@dataclass
class Command:
    name: str
    handler: object
    summary: str
    description: str
    options: list = field(default_factory=list)

    def add_to(self, subparsers):
        parser = subparsers.add_parser(
            self.name, help=self.summary, description=self.description
        )
        for option in self.options:
            option.add_to(parser)
        return parser

    def run(self, namespace):
        """Call the handler with the options parsed into *namespace*."""
        return self.handler(
            **{j.dest: getattr(namespace, j.dest) for j in self.options}
        )


_COMMANDS = {}


def _options_for(func, option_help, short_flags):
    options = []
    for parameter in inspect.signature(func).parameters.values():
        if parameter.default is inspect.Parameter.empty:
            raise CommandRegistrationError(
                f"{func.__name__}: parameter '{parameter.name}' needs a default"
                " to become an option"
            )
        flags = ("--" + parameter.name.replace("_", "-"),)
        if parameter.name in short_flags:
            flags += (short_flags[parameter.name],)
        options.append(
            Option(
                parameter.name,
                flags,
                parameter.default,
                option_help.get(parameter.name),
            )
        )
    return options


def register_command(summary, description=None, option_help=None, short_flags=None):
    """Register the decorated function as the subcommand of the same name.

    *option_help* maps parameter names to help text and *short_flags* maps
    them to an extra flag such as ``-v``.
    """

    def decorator(func):
        name = func.__name__.replace("_", "-")
        if name in _COMMANDS:
            raise CommandRegistrationError(f"Command '{name}' already registered")
        _COMMANDS[name] = Command(
            name,
            func,
            summary.strip(),
            (description or summary).strip(),
            _options_for(func, option_help or {}, short_flags or {}),
        )
        return func

    return decorator


def registered_commands():
    return _COMMANDS


def add_commands(subparsers):
    for command in _COMMANDS.values():
        command.add_to(subparsers)


def find_command(name):
    try:
        return _COMMANDS[name]
    except KeyError:
        raise CommandRegistrationError(f"Unknown command '{name}'") from None
