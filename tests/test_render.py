import pytest

from hostmdx import render


def test_render_markdown(tmp_path):
    html = render.render_document("# Title\n\nSome *text*.\n", tmp_path)
    assert '<h1 id="title">Title</h1>' in html
    assert "<em>text</em>" in html


def test_code_is_highlighted(tmp_path):
    html = render.render_document("```python\nx = 1\n```\n", tmp_path)
    assert 'class="highlight"' in html


def test_module_statements_are_dropped(tmp_path):
    source = (
        "import Chart from './chart.js'\n"
        "export const meta = {}\n"
        "\n"
        "Body\n"
        "\n"
        "```js\n"
        "import x from 'y'\n"
        "```\n"
    )
    html = render.render_document(source, tmp_path)
    assert "Chart" not in html
    assert "meta" not in html
    assert "Body" in html
    assert "import" in html


def test_includes_resolve_relative_to_source_dir(tmp_path):
    parts = tmp_path / "parts"
    parts.mkdir()
    (parts / "intro.mdx").write_text("Included {{< include more.mdx >}}")
    (parts / "more.mdx").write_text("deeper")
    html = render.render_document("{{< include parts/intro.mdx >}}", tmp_path)
    assert "Included deeper" in html


def test_missing_include_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        render.render_document("{{< include nope.mdx >}}", tmp_path)


def test_include_cycle_raises(tmp_path):
    (tmp_path / "a.mdx").write_text("{{< include b.mdx >}}")
    (tmp_path / "b.mdx").write_text("{{< include a.mdx >}}")
    with pytest.raises(ValueError):
        render.render_document("{{< include a.mdx >}}", tmp_path)


def test_split_front_matter():
    meta, body = render.split_front_matter("---\ntitle: Hello\n---\n# Body\n")
    assert meta == {"title": "Hello"}
    assert body == "# Body\n"
    meta, body = render.split_front_matter("# No front matter\n---\n")
    assert meta == {}
    assert body == "# No front matter\n---\n"


def test_front_matter_must_be_mapping():
    with pytest.raises(ValueError):
        render.split_front_matter("---\n- a\n- b\n---\nbody")


def test_wrap_document():
    page = render.wrap_document("<p>hi</p>", {"title": "A & B"})
    assert page.startswith("<!DOCTYPE html>\n")
    assert "<title>A &amp; B</title>" in page
    assert "<p>hi</p>" in page
    assert "<style>" not in page


def test_wrap_document_adds_highlight_css():
    page = render.wrap_document('<div class="highlight"><pre>x</pre></div>')
    assert "<style>" in page
    assert ".highlight" in page
