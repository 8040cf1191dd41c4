import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.tugs.table import split_rows


def test_split_rows_strips_bom_and_trims_fields():
    rows = split_rows("\ufeffLocation , Min\n  Fairport ,  50 \n")
    assert rows == [["Location", "Min"], ["Fairport", "50"]]


def test_split_rows_handles_quotes_and_doubled_quotes():
    rows = split_rows('a,b\n"x, y","say ""hi"""\n')
    assert rows == [["a", "b"], ["x, y", 'say "hi"']]


def test_split_rows_line_endings_are_equivalent():
    expected = [["a", "b"], ["1", "2"], ["3", "4"]]
    assert split_rows("a,b\n1,2\n3,4") == expected
    assert split_rows("a,b\r\n1,2\r\n3,4\r\n") == expected
    assert split_rows("a,b\r1,2\r3,4\r") == expected


def test_split_rows_keeps_line_breaks_inside_quotes():
    rows = split_rows('a,b\n"line one\nline two",2\n')
    assert rows == [["a", "b"], ["line one\nline two", "2"]]


def test_split_rows_drops_placeholder_blank_and_single_field_rows():
    text = "a,b\n...\n...,\n , \n,,,\nlonely\n1,2\n"
    assert split_rows(text) == [["a", "b"], ["1", "2"]]


def test_split_rows_tolerates_unterminated_quote():
    rows = split_rows('a,b\n1,"open field, still open\n2,3')
    assert rows == [["a", "b"], ["1", "open field, still open\n2,3"]]


def test_split_rows_empty_input():
    assert split_rows("") == []
    assert split_rows("\n\n\r\n") == []
