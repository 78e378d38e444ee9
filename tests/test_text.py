import pytest

from doc_history.core.text import normalize
from doc_history.errors import InvalidInputError


def test_empty_text_has_no_lines():
    text = normalize("")
    assert text.lines == ()
    assert not text.trailing_newline


def test_trailing_newline_adds_no_empty_line():
    with_newline = normalize("a\n")
    without_newline = normalize("a")

    assert with_newline.lines == without_newline.lines == ("a",)
    assert with_newline.trailing_newline
    assert not without_newline.trailing_newline


def test_blank_lines_are_kept():
    text = normalize("a\n\nb\n\n")
    assert text.lines == ("a", "", "b", "")
    assert text.trailing_newline


def test_single_newline_is_one_empty_line():
    text = normalize("\n")
    assert text.lines == ("",)
    assert text.to_text() == "\n"


@pytest.mark.parametrize("raw", ["", "a", "a\n", "a\nb", "a\r\nb\r\n", "\n\n", "x\n\ny"])
def test_to_text_rebuilds_input_exactly(raw):
    assert normalize(raw).to_text() == raw


def test_non_text_is_rejected():
    with pytest.raises(InvalidInputError):
        normalize(b"bytes")
