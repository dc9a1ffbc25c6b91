"""
Program loading: validates loop brackets and precomputes jump targets
"""

from types import MappingProxyType

from Errors import UnmatchedBracketError
from instructions import Instruction


def match_brackets(body):
    """
    Pair every LOOP_OPEN with its LOOP_CLOSE using an explicit stack

    Returns:
        Dict mapping each bracket index to the index of its partner

    Raises:
        UnmatchedBracketError: With the index of the offending bracket
    """
    jumps = {}
    pending = []

    for index, instruction in enumerate(body):
        if instruction is Instruction.LOOP_OPEN:
            pending.append(index)
        elif instruction is Instruction.LOOP_CLOSE:
            if not pending:
                raise UnmatchedBracketError(index, Instruction.LOOP_CLOSE.symbol)
            opening = pending.pop()
            jumps[opening] = index
            jumps[index] = opening

    if pending:
        # innermost unclosed bracket is the one reported
        raise UnmatchedBracketError(pending[-1], Instruction.LOOP_OPEN.symbol)

    return jumps


class Program:
    """Instruction sequence ending with END_OF_PROGRAM plus its bracket jump table"""

    def __init__(self, instructions, jumps=None):
        """
        Args:
            instructions: Instructions, the last one END_OF_PROGRAM
            jumps: Optional precomputed jump table, checked against the brackets

        Raises:
            ValueError: If the end marker is missing or misplaced, or jumps is wrong
            UnmatchedBracketError: If a bracket has no partner
        """
        instructions = tuple(instructions)
        if not instructions or instructions[-1] is not Instruction.END_OF_PROGRAM:
            raise ValueError("Program must end with END_OF_PROGRAM")
        if Instruction.END_OF_PROGRAM in instructions[:-1]:
            raise ValueError("END_OF_PROGRAM may only appear as the last instruction")

        matched = match_brackets(instructions[:-1])
        if jumps is not None and dict(jumps) != matched:
            raise ValueError("Jump table does not pair the program's brackets")

        self.instructions = instructions
        self.jumps = MappingProxyType(matched)

    def jump_target(self, index):
        """Index of the bracket matching the one at index"""
        return self.jumps[index]

    @property
    def loop_pairs(self):
        """(open, close) index pairs in order of their opening bracket"""
        return sorted(
            (index, target) for index, target in self.jumps.items() if index < target
        )

    def __len__(self):
        return len(self.instructions)

    def __getitem__(self, index):
        return self.instructions[index]

    def __iter__(self):
        return iter(self.instructions)

    def __repr__(self):
        return f"Program({len(self.instructions)} instructions, {len(self.jumps) // 2} loops)"


def load_program(instructions):
    """
    Build a Program from decoded instructions

    Scanning stops at the first END_OF_PROGRAM; one is appended if absent.

    Args:
        instructions: Iterable of Instruction

    Returns:
        Program with bidirectional LOOP_OPEN <-> LOOP_CLOSE jumps

    Raises:
        UnmatchedBracketError: With the index of the offending bracket
    """
    body = []
    for instruction in instructions:
        if instruction is Instruction.END_OF_PROGRAM:
            break
        body.append(instruction)

    body.append(Instruction.END_OF_PROGRAM)
    return Program(body)
