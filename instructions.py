"""
Instruction alphabet for image programs
Eight tape-machine commands plus the end-of-program marker
"""

from enum import Enum


class Instruction(Enum):
    """One program instruction, valued by its source symbol"""

    MOVE_RIGHT = '>'
    MOVE_LEFT = '<'
    INCREMENT = '+'
    DECREMENT = '-'
    OUTPUT = '.'
    INPUT = ','
    LOOP_OPEN = '['
    LOOP_CLOSE = ']'
    END_OF_PROGRAM = ''

    @property
    def symbol(self):
        return self.value

    @property
    def is_stackable(self):
        """Consecutive repeats of this instruction can share one encoded run"""
        return self in STACKABLE

    def __repr__(self):
        return f"Instruction.{self.name}"


STACKABLE = frozenset({
    Instruction.MOVE_RIGHT,
    Instruction.MOVE_LEFT,
    Instruction.INCREMENT,
    Instruction.DECREMENT,
})

# End-of-program has no source symbol
SYMBOLS = {
    instruction.symbol: instruction
    for instruction in Instruction
    if instruction is not Instruction.END_OF_PROGRAM
}


def instruction_for_symbol(char):
    """Return the Instruction for a source character, or None for comments"""
    return SYMBOLS.get(char)
