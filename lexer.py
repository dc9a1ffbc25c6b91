"""
Program source lexing
Turns program text into Instructions and back
"""

from collections import namedtuple

from Errors import LexError
from instructions import Instruction, instruction_for_symbol


class Position(namedtuple('Position', ['line', 'column'])):
    """1-based source position"""

    __slots__ = ()

    def __str__(self):
        return f"line {self.line}, column {self.column}"


Token = namedtuple('Token', ['instruction', 'position'])

WHITESPACE = ' \t\r\n'


def scan_tokens(source, strict=False):
    """
    Scan program text into tokens

    Args:
        source: Program text
        strict: Reject any character that is not an instruction or whitespace

    Returns:
        List of Token, always terminated by an END_OF_PROGRAM token

    Raises:
        LexError: In strict mode, listing every unrecognized character
    """
    tokens = []
    errors = []
    line = 1
    column = 0

    for char in source:
        column += 1
        instruction = instruction_for_symbol(char)

        if instruction is not None:
            tokens.append(Token(instruction, Position(line, column)))
        elif char == '\n':
            line += 1
            column = 0
        elif strict and char not in WHITESPACE:
            errors.append((Position(line, column), f"Unrecognized character: {char!r}"))

    if errors:
        raise LexError(errors)

    tokens.append(Token(Instruction.END_OF_PROGRAM, Position(line, column + 1)))
    return tokens


def tokenize(source, strict=False):
    """Scan program text and keep only the Instructions"""
    return [token.instruction for token in scan_tokens(source, strict)]


def render_source(instructions, width=None):
    """
    Render Instructions back into program text

    Args:
        instructions: Iterable of Instruction
        width: Wrap lines at this many characters (None for one line)

    Returns:
        Program text, END_OF_PROGRAM renders as nothing
    """
    text = ''.join(instruction.symbol for instruction in instructions)

    if not width or width <= 0:
        return text

    return '\n'.join(text[i:i + width] for i in range(0, len(text), width))
