import pytest

from hostmdx.errors import BuildError
from hostmdx.hooks import HookSet
from hostmdx.ignore import IGNORE_FILE_NAME
from hostmdx.site_builder import build_site

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x01binary\xff"


def _tree(root):
    return sorted(
        p.relative_to(root).as_posix() for p in root.rglob("*")
    )


def _snapshot(root):
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in root.rglob("*")
        if p.is_file()
    }


def test_traversal_is_complete(site, make_session):
    input_root, output_root = site
    (input_root / "a.mdx").write_text("# Page A\n")
    (input_root / "b.png").write_bytes(PNG_BYTES)
    (input_root / "sub").mkdir()
    (input_root / "sub" / "c.mdx").write_text("Text of *c*\n")

    result = build_site(make_session())

    assert result.ok
    assert not result.abandoned
    assert _tree(output_root) == ["a.html", "b.png", "sub", "sub/c.html"]
    assert (output_root / "b.png").read_bytes() == PNG_BYTES
    page_a = (output_root / "a.html").read_text()
    assert page_a.startswith("<!DOCTYPE html>")
    assert "Page A</h1>" in page_a
    assert "<em>c</em>" in (output_root / "sub" / "c.html").read_text()


def test_rebuilding_unchanged_tree_is_byte_identical(site, make_session):
    input_root, output_root = site
    (input_root / "index.mdx").write_text("---\ntitle: Home\n---\n# Home\n\n```python\nprint(1)\n```\n")
    (input_root / "docs").mkdir()
    (input_root / "docs" / "one.mdx").write_text("one")
    (input_root / "docs" / "style.css").write_text("body {}")
    session = make_session()

    build_site(session)
    first = _snapshot(output_root)
    build_site(session)
    assert _snapshot(output_root) == first
    assert "<title>Home</title>" in first["index.html"].decode()


def test_stale_output_is_removed(site, make_session):
    input_root, output_root = site
    (output_root / "old.html").write_text("stale")
    (input_root / "new.mdx").write_text("new")
    build_site(make_session())
    assert _tree(output_root) == ["new.html"]


def test_missing_output_root_is_created(site, make_session):
    input_root, output_root = site
    output_root.rmdir()
    (input_root / "x.txt").write_text("x")
    build_site(make_session())
    assert (output_root / "x.txt").read_text() == "x"


def test_default_ignores_skip_own_files(site, make_session):
    input_root, output_root = site
    (input_root / "host-mdx.py").write_text("")
    (input_root / IGNORE_FILE_NAME).write_text("")
    (input_root / ".git").mkdir()
    (input_root / ".git" / "HEAD").write_text("ref")
    (input_root / "page.mdx").write_text("page")
    build_site(make_session())
    assert _tree(output_root) == ["page.html"]


def test_ignored_directory_prunes_subtree(site, make_session):
    input_root, output_root = site
    (input_root / IGNORE_FILE_NAME).write_text("drafts/\n!drafts/keep.mdx\n*.log\n")
    (input_root / "drafts").mkdir()
    (input_root / "drafts" / "keep.mdx").write_text("keep")
    (input_root / "debug.log").write_text("log")
    (input_root / "index.mdx").write_text("index")
    build_site(make_session())
    assert _tree(output_root) == ["index.html"]


def test_render_gets_parent_directory(site, make_session):
    input_root, output_root = site
    (input_root / "nested").mkdir()
    (input_root / "nested" / "doc.mdx").write_text("body")
    calls = []

    def fake_render(text, source_dir):
        calls.append((text, source_dir))
        return "<p>rendered</p>"

    build_site(make_session(render=fake_render))
    assert calls == [("body", input_root / "nested")]
    assert "<p>rendered</p>" in (output_root / "nested" / "doc.html").read_text()


def test_render_failure_aborts_build(site, make_session):
    input_root, output_root = site
    (input_root / "bad.mdx").write_text("{{< include missing.mdx >}}")
    with pytest.raises(BuildError) as excinfo:
        build_site(make_session())
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)
    assert excinfo.value.source_path == input_root / "bad.mdx"


def test_hook_failure_aborts_build(site, make_session):
    input_root, _ = site
    (input_root / "a.txt").write_text("a")

    def explode(*args):
        raise RuntimeError("hook failed")

    with pytest.raises(BuildError):
        build_site(make_session(hooks=HookSet(on_file_create_start=explode)))


def test_hooks_wrap_each_entry(site, make_session):
    input_root, output_root = site
    (input_root / "a.mdx").write_text("A")
    (input_root / "b.txt").write_text("B")
    events = []
    hooks = HookSet(
        on_site_create_start=lambda i, o: events.append(("site-start", i, o)),
        on_site_create_end=lambda i, o, pending: events.append(("site-end", pending)),
        on_file_create_start=lambda i, o, src, dest: events.append(("start", src.name, dest.name)),
        on_file_create_end=lambda i, o, src, dest, result: events.append(
            ("end", src.name, dest.name, result is not None)
        ),
    )
    build_site(make_session(hooks=hooks))

    assert events[0] == ("site-start", input_root, output_root)
    assert events[-1] == ("site-end", False)
    assert ("start", "site", "out") in events
    assert ("start", "a.mdx", "a.html") in events
    assert ("end", "a.mdx", "a.html", True) in events
    assert ("end", "b.txt", "b.txt", False) in events
    assert events.index(("start", "a.mdx", "a.html")) < events.index(
        ("end", "a.mdx", "a.html", True)
    )


def test_build_can_be_abandoned(site, make_session):
    input_root, output_root = site
    for name in "abc":
        (input_root / f"{name}.txt").write_text(name)
    ended = []
    hooks = HookSet(on_site_create_end=lambda i, o, pending: ended.append(pending))
    checks = []

    def should_abandon():
        checks.append(1)
        return len(checks) > 2

    result = build_site(make_session(hooks=hooks), should_abandon=should_abandon)
    assert result.abandoned
    assert len(result.written) == 2
    assert ended == [True]


def test_dangling_symlink_is_skipped(site, make_session):
    input_root, output_root = site
    (input_root / "page.mdx").write_text("page")
    # editors such as emacs leave lock files as links to nowhere
    (input_root / ".#page.mdx").symlink_to("/nonexistent/target")
    result = build_site(make_session())
    assert result.ok
    assert _tree(output_root) == ["page.html"]
