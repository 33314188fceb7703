"""
Elementary Markup -- Parsing + Text Decoding Tests
"""

from elementary.kernel.markup import decode_text, is_blank, parse_markup, to_fragments


class TestParseMarkup:
    def test_elements_and_text(self):
        nodes = parse_markup('<p class="x">a<br>b</p>')
        assert nodes == [
            {
                "type": "element",
                "tag": "p",
                "attributes": {"class": "x"},
                "children": [
                    {"type": "text", "content": "a"},
                    {"type": "element", "tag": "br", "attributes": {}, "children": []},
                    {"type": "text", "content": "b"},
                ],
            }
        ]

    def test_entities_kept_in_one_text_node(self):
        nodes = parse_markup("a &lt; b &amp; c")
        assert nodes == [{"type": "text", "content": "a &lt; b &amp; c"}]

    def test_unclosed_tags_close_at_end(self):
        assert to_fragments(parse_markup("<ul><li>one<li>two</ul>")) == [
            ["ul", {}, ["li", {}, "one", ["li", {}, "two"]]]
        ]

    def test_stray_end_tag_ignored(self):
        assert to_fragments(parse_markup("a</span>b")) == ["ab"]

    def test_self_closing(self):
        assert to_fragments(parse_markup('<img src="x"/>')) == [["img", {"src": "x"}]]

    def test_blank(self):
        text, elem = parse_markup("\n <p></p>")
        assert is_blank(text)
        assert not is_blank(elem)


class TestDecodeText:
    def test_fixed_set(self):
        assert decode_text("&lt;a href=&quot;x&quot;&gt;") == '<a href="x">'

    def test_ampersand_last(self):
        assert decode_text("&amp;lt;") == "&lt;"

    def test_numeric(self):
        assert decode_text("&#65;&#x42;&#X43;") == "ABC"

    def test_out_of_range_numeric_kept(self):
        assert decode_text("&#99999999999;") == "&#99999999999;"

    def test_named_entities_outside_the_set(self):
        assert decode_text("&copy; &nbsp;") == "&copy; &nbsp;"
