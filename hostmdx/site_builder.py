"""Full rebuild of the output tree from the input tree."""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from .errors import BuildError
from .ignore import compile_ignore_file
from .output_map import EntryKind, TreeEntry, classify, map_path
from .render import split_front_matter, wrap_document
from .session import log


@dataclass
class BuildResult:
    ok: bool
    errors: list = field(default_factory=list)
    abandoned: bool = False
    written: list = field(default_factory=list)


def _render_page(session, entry):
    text = entry.absolute_path.read_text(encoding="utf-8")
    metadata, body = split_front_matter(text)
    fragment = session.render(body, entry.absolute_path.parent)
    return wrap_document(fragment, metadata, session.render_settings)


def _create_entry(session, entry, dest):
    hooks = session.hooks
    log(f"{entry.absolute_path} ---> {dest}", verbose_only=True)
    hooks.on_file_create_start(
        session.input_root, session.output_root, entry.absolute_path, dest
    )
    result = None
    if entry.kind is EntryKind.DIR:
        dest.mkdir(parents=True, exist_ok=True)
    elif entry.kind is EntryKind.DOCUMENT:
        result = _render_page(session, entry)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(result, encoding="utf-8")
    else:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(entry.absolute_path, dest)
    hooks.on_file_create_end(
        session.input_root, session.output_root, entry.absolute_path, dest, result
    )


def build_site(session, should_abandon=None):
    """Delete and regenerate ``session.output_root``.

    Entries are processed one at a time from an explicit stack. Any failure
    while processing an entry raises :class:`BuildError`; the partially
    written output tree is left as is. When *should_abandon* returns true the
    traversal stops early, since a fresh build is about to follow.
    """
    input_root = session.input_root
    output_root = session.output_root
    log("Creating site...")
    session.hooks.on_site_create_start(input_root, output_root)
    if output_root.exists():
        shutil.rmtree(output_root)

    ignore = compile_ignore_file(session.ignore_file)
    result = BuildResult(ok=True)
    stack = [input_root]
    while stack:
        if should_abandon is not None and should_abandon():
            log("Rebuild requested, abandoning current build", verbose_only=True)
            result.abandoned = True
            break
        current = stack.pop()
        if not os.path.exists(current):
            # removed since its parent was listed, or a dangling link
            continue
        relative = current.relative_to(input_root).as_posix()
        if relative == ".":
            relative = ""
        kind = classify(current)
        if ignore.matches(relative, is_dir=kind is EntryKind.DIR):
            continue
        entry = TreeEntry(current, relative, kind)
        dest = output_root / map_path(relative, kind)
        try:
            _create_entry(session, entry, dest)
            if kind is EntryKind.DIR:
                stack.extend(current.iterdir())
        except Exception as exc:
            raise BuildError(current, str(exc) or type(exc).__name__) from exc
        result.written.append(dest)

    session.hooks.on_site_create_end(input_root, output_root, result.abandoned)
    log("Created site")
    return result
