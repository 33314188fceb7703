"""
Elementary Widgets -- Code Block Tests

{"code": {"source": <expr>, "lang": <expr>}}

The highlighter's markup is parsed back into fragments, so highlighted code
flows through the same adapter as everything else:

  ["pre", {"class": "language-X"}, ["code", {"class": "language-X"}, *spans]]

This matters because:
  - Escaped characters must come back as the characters the author wrote
  - Unknown languages are a compile error, not a crash
  - Structured JSON sources are pretty-printed before highlighting
"""

from elementary.kernel.app import App
from elementary.kernel.compiler import compile_view
from elementary.kernel.fragments import to_html


def text_of(fragment):
    """Concatenate every text leaf of a fragment tree."""
    if isinstance(fragment, str):
        return fragment
    if isinstance(fragment, list):
        children = fragment[2:] if fragment and isinstance(fragment[0], str) else fragment
        return "".join(text_of(c) for c in children)
    return ""


def compile_code(source, lang, model=None, app=None):
    return compile_view({}, {"code": {"source": source, "lang": lang}}, model, app=app)


class StaticHighlighter:
    def __init__(self, markup):
        self.markup = markup

    def highlight(self, lang, source):
        return self.markup


class BrokenHighlighter:
    def highlight(self, lang, source):
        raise RuntimeError("lexer exploded")


# ============================================================================
# Structure
# ============================================================================


class TestCodeStructure:
    def test_pre_code_wrapper(self):
        result = compile_code("a < b", "python")
        assert result.ok, result.err

        pre, pre_attrs, code = result.view
        assert pre == "pre"
        assert pre_attrs == {"class": "language-python"}
        assert code[0] == "code"
        assert code[1] == {"class": "language-python"}

    def test_highlighted_spans(self):
        code = compile_code("x = 1", "python").view[2]
        spans = [c for c in code[2:] if isinstance(c, list)]
        assert spans
        assert all(s[0] == "span" and "class" in s[1] for s in spans)

    def test_escapes_are_decoded(self):
        code = compile_code("a < b", "python").view[2]
        assert text_of(code).strip() == "a < b"

    def test_quotes_and_ampersands_are_decoded(self):
        code = compile_code('s = "a & b"', "python").view[2]
        assert text_of(code).strip() == 's = "a & b"'

    def test_renders_back_to_escaped_html(self):
        html = to_html(compile_code("a < b", "python").view)
        assert html.startswith('<pre class="language-python"><code class="language-python">')
        assert "&lt;" in html
        assert html.endswith("</code></pre>")

    def test_source_is_an_expression(self):
        code = compile_code({"get": "snippet"}, "python", {"snippet": "print(1)"}).view[2]
        assert text_of(code).strip() == "print(1)"

    def test_lang_is_an_expression(self):
        result = compile_code("x", {"get": "lang"}, {"lang": "python"})
        assert result.view[1] == {"class": "language-python"}


# ============================================================================
# JSON sources
# ============================================================================


class TestJsonSource:
    def test_structured_source_is_pretty_printed(self):
        result = compile_code({"get": "payload"}, "json", {"payload": {"a": 1}})
        assert text_of(result.view[2]).strip() == '{\n  "a": 1\n}'

    def test_string_source_is_left_alone(self):
        result = compile_code('{"a":1}', "json")
        assert text_of(result.view[2]).strip() == '{"a":1}'


# ============================================================================
# Highlighter markup
# ============================================================================


class TestHighlighterMarkup:
    def test_nested_markup(self):
        app = App(highlighter=StaticHighlighter('<span class="k">def</span> <b><i>f</i></b>'))
        code = compile_code("ignored", "python", app=app).view[2]
        assert code[2:] == [["span", {"class": "k"}, "def"], " ", ["b", {}, ["i", {}, "f"]]]

    def test_numeric_references(self):
        app = App(highlighter=StaticHighlighter("&#60;&#x3E;"))
        code = compile_code("ignored", "python", app=app).view[2]
        assert code[2:] == ["<>"]

    def test_other_named_entities_untouched(self):
        app = App(highlighter=StaticHighlighter("a&nbsp;b"))
        code = compile_code("ignored", "python", app=app).view[2]
        assert code[2:] == ["a&nbsp;b"]


# ============================================================================
# Errors
# ============================================================================


class TestCodeErrors:
    def test_unknown_language(self):
        result = compile_code("x", "no-such-language-at-all")
        assert result.err.reason == "unsupported_code_language"

    def test_missing_language(self):
        assert compile_code("x", None).err.reason == "unsupported_code_language"

    def test_highlighter_failure(self):
        result = compile_code("x", "python", app=App(highlighter=BrokenHighlighter()))
        assert result.err.reason == "code_highlight_error"
        assert "lexer exploded" in result.err.message

    def test_source_encode_error(self):
        result = compile_code({"eq": 1}, "python")
        assert result.err.reason == "bad_operand"
        assert result.err.spec == {"code": {"source": {"eq": 1}, "lang": "python"}}
