"""Markdown/MDX rendering and the HTML envelope around rendered pages."""

import copy
import re
from pathlib import Path

import markdown
import yaml
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pygments.formatters import HtmlFormatter

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
PAGE_TEMPLATE = "page.html"

include_pattern = re.compile(r"\{\{\s*<\s*include\s+([^>\s]+)\s*>\s*\}\}")
# MDX module statements have no meaning once rendered to static html
esm_pattern = re.compile(r"^(?:import|export)\s")
fence_pattern = re.compile(r"^\s*(```|~~~)")
front_matter_pattern = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)

_environment = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    keep_trailing_newline=True,
)


def default_render_settings():
    return {
        "extensions": ["extra", "toc", "sane_lists", "codehilite"],
        "extension_configs": {
            "codehilite": {"css_class": "highlight", "guess_lang": False},
        },
        "pygments_style": "default",
    }


def split_front_matter(text):
    """Return ``(metadata, body)`` for text that may open with a YAML block."""
    m = front_matter_pattern.match(text)
    if not m:
        return {}, text
    metadata = yaml.safe_load(m.group(1))
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise ValueError("front matter must be a mapping")
    return metadata, text[m.end():]


def strip_module_statements(text):
    lines = []
    in_fence = None
    for line in text.splitlines(keepends=True):
        m = fence_pattern.match(line)
        if m:
            if in_fence is None:
                in_fence = m.group(1)
            elif m.group(1) == in_fence:
                in_fence = None
        elif in_fence is None and esm_pattern.match(line):
            continue
        lines.append(line)
    return "".join(lines)


def expand_includes(text, base_dir, _active=()):
    """Replace ``{{< include path >}}`` with the file text, relative to *base_dir*."""
    base_dir = Path(base_dir)

    def repl(match):
        target = (base_dir / match.group(1)).resolve()
        if target in _active:
            raise ValueError(f"include cycle through {target}")
        if not target.is_file():
            raise FileNotFoundError(
                f"Include file '{match.group(1)}' not found in '{base_dir}'"
            )
        included = target.read_text(encoding="utf-8")
        return expand_includes(included, target.parent, _active + (target,))

    return include_pattern.sub(repl, text)


def render_document(source_text, source_dir, settings=None):
    """Render one document body to an html fragment."""
    if settings is None:
        settings = default_render_settings()
    text = expand_includes(source_text, source_dir)
    text = strip_module_statements(text)
    md = markdown.Markdown(
        extensions=list(settings.get("extensions", [])),
        extension_configs=copy.deepcopy(settings.get("extension_configs", {})),
    )
    return md.convert(text)


def wrap_document(fragment, metadata=None, settings=None):
    """Put a rendered fragment inside a complete html page."""
    if settings is None:
        settings = default_render_settings()
    metadata = metadata or {}
    highlight_css = None
    if 'class="highlight"' in fragment:
        formatter = HtmlFormatter(style=settings.get("pygments_style", "default"))
        highlight_css = formatter.get_style_defs(".highlight")
    template = _environment.get_template(PAGE_TEMPLATE)
    return template.render(
        title=metadata.get("title"),
        highlight_css=highlight_css,
        content=fragment,
    )
