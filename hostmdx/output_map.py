import enum
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

DOCUMENT_SUFFIX = ".mdx"
RENDERED_SUFFIX = ".html"


class EntryKind(enum.Enum):
    DIR = "dir"
    DOCUMENT = "document"
    OTHER_FILE = "other"


@dataclass(frozen=True)
class TreeEntry:
    absolute_path: Path
    relative_path: str
    kind: EntryKind


def classify(path: Path) -> EntryKind:
    if path.is_dir():
        return EntryKind.DIR
    if path.name.endswith(DOCUMENT_SUFFIX):
        return EntryKind.DOCUMENT
    return EntryKind.OTHER_FILE


def map_path(relative_path: str, kind: EntryKind) -> str:
    """Return the output path (relative, posix) for an input entry."""
    if kind is not EntryKind.DOCUMENT:
        return relative_path
    path = PurePosixPath(relative_path)
    return str(path.with_name(path.name[: -len(DOCUMENT_SUFFIX)] + RENDERED_SUFFIX))
