import pytest

from Errors import LexError
from instructions import Instruction
from lexer import Position, render_source, scan_tokens, tokenize


def test_all_symbols():
    assert tokenize("><+-.,[]") == [
        Instruction.MOVE_RIGHT,
        Instruction.MOVE_LEFT,
        Instruction.INCREMENT,
        Instruction.DECREMENT,
        Instruction.OUTPUT,
        Instruction.INPUT,
        Instruction.LOOP_OPEN,
        Instruction.LOOP_CLOSE,
        Instruction.END_OF_PROGRAM,
    ]


def test_empty_source_is_just_end_marker():
    assert tokenize("") == [Instruction.END_OF_PROGRAM]


def test_comments_are_skipped():
    assert tokenize("add one + then print .") == [
        Instruction.INCREMENT,
        Instruction.OUTPUT,
        Instruction.END_OF_PROGRAM,
    ]


def test_positions_track_lines_and_columns():
    tokens = scan_tokens("+\n >")
    assert [token.position for token in tokens] == [
        Position(1, 1),
        Position(2, 2),
        Position(2, 3),
    ]
    assert str(Position(2, 2)) == "line 2, column 2"


def test_strict_mode_reports_every_bad_character():
    with pytest.raises(LexError) as excinfo:
        tokenize("+a\n b", strict=True)

    positions = [position for position, _ in excinfo.value.errors]
    assert positions == [Position(1, 2), Position(2, 2)]


def test_strict_mode_allows_whitespace():
    assert tokenize(" +\t-\r\n", strict=True) == [
        Instruction.INCREMENT,
        Instruction.DECREMENT,
        Instruction.END_OF_PROGRAM,
    ]


def test_render_source():
    source = "+[->+<]."
    assert render_source(tokenize(source)) == source


def test_render_source_wraps():
    assert render_source(tokenize("++++++"), width=4) == "++++\n++"
