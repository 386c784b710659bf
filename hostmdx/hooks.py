"""Lifecycle hooks loaded from ``host-mdx.py`` at the input root.

Every slot is optional. Missing slots are filled with no-ops once, when the
session is created, so callers never check whether a hook exists.
"""

import asyncio
import importlib.util
import inspect
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable

from .ignore import CONFIG_FILE_NAME


def _noop(*args):
    return None


def _identity(settings):
    return settings


async def _await(awaitable):
    return await awaitable


def _awaiting(func):
    # Async hooks are run to completion before the build continues.
    def call(*args):
        result = func(*args)
        if inspect.isawaitable(result):
            return asyncio.run(_await(result))
        return result

    call.__name__ = getattr(func, "__name__", "hook")
    call.__wrapped__ = func
    return call


@dataclass(frozen=True)
class HookSet:
    on_site_create_start: Callable = _noop
    on_site_create_end: Callable = _noop
    on_file_create_start: Callable = _noop
    on_file_create_end: Callable = _noop
    on_host_start: Callable = _noop
    on_host_end: Callable = _noop
    mod_render_settings: Callable = _identity

    @classmethod
    def from_namespace(cls, namespace):
        """Pick the known slots off a module or any object with attributes."""
        found = {}
        for field in fields(cls):
            func = getattr(namespace, field.name, None)
            if func is None:
                continue
            if not callable(func):
                raise TypeError(f"hook {field.name!r} is not callable")
            found[field.name] = _awaiting(func)
        return cls(**found)


def load_hooks(input_root):
    """Import the hook module at *input_root* if it exists."""
    config_path = Path(input_root) / CONFIG_FILE_NAME
    if not config_path.is_file():
        return HookSet()
    spec = importlib.util.spec_from_file_location("host_mdx_hooks", config_path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return HookSet.from_namespace(module)
