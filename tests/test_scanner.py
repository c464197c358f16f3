"""
Тесты инкрементального сканера SSI-тегов.
"""

import pytest

from ssi.scanner import ScanEvent, TagScanner, scan


def _collect(chunks):
    """Склеенный текст и список тел тегов, независимо от нарезки событий."""
    events = list(scan(chunks))
    literal = "".join(e.literal for e in events)
    tags = [e.tag for e in events if e.has_tag]
    return literal, tags


DOCUMENT = 'a<!--#echo var="X" -->b<!--#set var="Y" value="1"-->c'


class TestTagScanner:

    def test_plain_text_passes_through(self):
        """Текст без <!--# выдаётся без изменений"""
        text = "<p>plain <!-- html comment --> text</p>\n"
        assert list(scan([text])) == [ScanEvent(text)]

    def test_single_tag(self):
        events = list(scan(['a<!--#echo var="X" -->b']))
        assert events == [
            ScanEvent("a", 'echo var="X"'),
            ScanEvent("b"),
        ]

    def test_whitespace_before_end_belongs_to_delimiter(self):
        events = list(scan(['<!--#endif   \n -->']))
        assert events == [ScanEvent("", "endif")]

    def test_adjacent_tags(self):
        literal, tags = _collect(['<!--#if expr="1" --><!--#endif -->'])
        assert literal == ""
        assert tags == ['if expr="1"', "endif"]

    def test_end_delimiter_searched_after_start(self):
        """--> перед началом тега остаётся текстом"""
        literal, tags = _collect(['x -->y<!--#endif -->z'])
        assert literal == "x -->yz"
        assert tags == ["endif"]

    @pytest.mark.parametrize("split", range(1, len(DOCUMENT)))
    def test_split_at_every_position(self, split):
        """Граница чанков в любом месте, включая разделители"""
        expected = _collect([DOCUMENT])
        assert _collect([DOCUMENT[:split], DOCUMENT[split:]]) == expected

    def test_single_character_chunks(self):
        assert _collect(list(DOCUMENT)) == _collect([DOCUMENT])

    def test_empty_chunks_are_skipped(self):
        literal, tags = _collect(["", "a", "", "<!--#", "", "endif -->", "b", ""])
        assert literal == "ab"
        assert tags == ["endif"]

    def test_partial_start_at_end_of_input_is_text(self):
        literal, tags = _collect(["x<!--"])
        assert literal == "x<!--"
        assert tags == []

    def test_unterminated_tag_ends_scanning(self):
        events = list(scan(['a<!--#echo var="X"', " and more"]))
        assert events == [ScanEvent("a", 'echo var="X" and more', terminated=False)]

    def test_empty_input(self):
        assert list(scan([])) == []
        assert list(scan([""])) == []

    def test_next_event_after_exhaustion(self):
        scanner = TagScanner(["abc"])
        assert scanner.next_event() == ScanEvent("abc")
        assert scanner.next_event() is None
        assert scanner.next_event() is None

    def test_reads_lazily_from_generator(self):
        """Сканер не читает источник дальше, чем нужно для очередного события"""
        consumed = []

        def source():
            for chunk in ["a<!--#endif -->", "b", "c"]:
                consumed.append(chunk)
                yield chunk

        scanner = TagScanner(source())
        assert scanner.next_event() == ScanEvent("a", "endif")
        assert consumed == ["a<!--#endif -->"]
