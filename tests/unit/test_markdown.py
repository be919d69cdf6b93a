"""Unit tests for web2md.markdown."""

from __future__ import annotations

from web2md.markdown import html_to_markdown, strip_boilerplate


class TestHeadings:
    def test_atx_headings(self) -> None:
        md = html_to_markdown("<h1>Title</h1><p>Text</p><h2>Sub</h2><p>More</p>")
        assert md == "# Title\n\nText\n\n## Sub\n\nMore"

    def test_deep_heading(self) -> None:
        assert html_to_markdown("<h4>Deep</h4>") == "#### Deep"


class TestBoilerplate:
    def test_script_content_removed(self) -> None:
        md = html_to_markdown("<p>Hello</p><script>alert('x')</script>")
        assert md == "Hello"

    def test_nav_footer_aside_removed(self) -> None:
        html = (
            "<nav><a href='/'>Home</a></nav><p>Body</p>"
            "<aside>Related links</aside><footer>Copyright</footer>"
        )
        assert html_to_markdown(html) == "Body"

    def test_strip_boilerplate_keeps_content(self) -> None:
        out = strip_boilerplate("<div><style>p{}</style><p>Keep</p><noscript>Enable JS</noscript></div>")
        assert "Keep" in out
        assert "Enable JS" not in out
        assert "p{}" not in out


class TestBlocks:
    def test_dash_bullets(self) -> None:
        md = html_to_markdown("<ul><li>one</li><li>two</li></ul>")
        assert md == "- one\n- two"

    def test_fenced_code_with_language(self) -> None:
        md = html_to_markdown('<pre><code class="language-python">print(1)</code></pre>')
        assert md.startswith("```python\n")
        assert "print(1)" in md
        assert md.endswith("```")

    def test_fenced_code_without_language(self) -> None:
        md = html_to_markdown("<pre><code>x = 1</code></pre>")
        assert md.startswith("```\n")

    def test_strikethrough(self) -> None:
        assert "~~old~~" in html_to_markdown("<p><del>old</del> new</p>")

    def test_table(self) -> None:
        md = html_to_markdown(
            "<table><tr><th>A</th><th>B</th></tr><tr><td>1</td><td>2</td></tr></table>"
        )
        assert "| A | B |" in md
        assert "| 1 | 2 |" in md

    def test_task_list(self) -> None:
        md = html_to_markdown(
            '<ul><li><input type="checkbox" checked>done</li>'
            '<li><input type="checkbox">todo</li></ul>'
        )
        assert "[x] done" in md
        assert "[ ] todo" in md


class TestNormalisation:
    def test_underscores_not_escaped(self) -> None:
        assert html_to_markdown("<p>snake_case_name</p>") == "snake_case_name"

    def test_blank_lines_collapsed(self) -> None:
        md = html_to_markdown("<p>a</p><div></div><div></div><p>b</p>")
        assert "\n\n\n" not in md

    def test_no_trailing_whitespace(self) -> None:
        md = html_to_markdown("<p>line one<br>line two</p>")
        assert all(line == line.rstrip() for line in md.split("\n"))

    def test_empty_input(self) -> None:
        assert html_to_markdown("") == ""
        assert html_to_markdown("   \n") == ""

    def test_deterministic(self) -> None:
        html = "<h2>A</h2><p>x</p><ul><li>y</li></ul>"
        assert html_to_markdown(html) == html_to_markdown(html)
