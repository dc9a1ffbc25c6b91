"""
Delta table: the fixed bijection between instructions and pixel deltas

A table is built once and handed to every codec that needs it. The zero
vector is never assigned, it marks a continuation pixel.
"""

from collections import namedtuple
from itertools import combinations
from types import MappingProxyType

from Constants import CHANNEL_MODULUS, MINIMUM_PIXEL_DISTANCE
from Errors import UnknownDeltaError
from instructions import Instruction


DeltaVector = namedtuple('DeltaVector', ['dr', 'dg', 'db', 'da'])

ZERO_DELTA = DeltaVector(0, 0, 0, 0)

# Order of the distance offsets in the default table
DEFAULT_ORDER = (
    Instruction.INCREMENT,
    Instruction.DECREMENT,
    Instruction.MOVE_RIGHT,
    Instruction.MOVE_LEFT,
    Instruction.LOOP_OPEN,
    Instruction.LOOP_CLOSE,
    Instruction.OUTPUT,
    Instruction.INPUT,
    Instruction.END_OF_PROGRAM,
)


def normalize_delta(vector):
    """Reduce each component modulo 256 so signed and wrapped forms compare equal"""
    return DeltaVector(*(component % CHANNEL_MODULUS for component in vector))


def _channel_distance(a, b):
    diff = (a - b) % CHANNEL_MODULUS
    return min(diff, CHANNEL_MODULUS - diff)


class DeltaTable:
    """Immutable Instruction <-> DeltaVector mapping"""

    def __init__(self, vectors):
        """
        Args:
            vectors: Mapping of every Instruction to a 4-component delta

        Raises:
            ValueError: If the mapping is incomplete, uses the zero vector,
                        or assigns two instructions the same delta
        """
        missing = [instruction.name for instruction in Instruction if instruction not in vectors]
        if missing:
            raise ValueError(f"Delta table is missing instructions: {', '.join(missing)}")

        by_instruction = {}
        by_delta = {}

        for instruction, vector in vectors.items():
            if not isinstance(instruction, Instruction):
                raise ValueError(f"Not an instruction: {instruction!r}")
            if len(vector) != 4:
                raise ValueError(f"Delta for {instruction.name} must have 4 components")
            for component in vector:
                if not isinstance(component, int) or not -255 <= component <= 255:
                    raise ValueError(f"Delta component out of range for {instruction.name}: {component!r}")

            delta = DeltaVector(*vector)
            key = normalize_delta(delta)

            if key == ZERO_DELTA:
                raise ValueError(f"Zero delta is reserved for continuation pixels ({instruction.name})")
            if key in by_delta:
                raise ValueError(
                    f"{instruction.name} and {by_delta[key].name} share delta {tuple(key)}"
                )

            by_instruction[instruction] = delta
            by_delta[key] = instruction

        self._by_instruction = MappingProxyType(by_instruction)
        self._by_delta = MappingProxyType(by_delta)

    @classmethod
    def uniform(cls, base_distance=MINIMUM_PIXEL_DISTANCE):
        """
        Build the standard table: instruction k moves every channel by base + k

        Args:
            base_distance: Distance assigned to the first instruction (1-247)
        """
        if not 1 <= base_distance <= 255 - (len(DEFAULT_ORDER) - 1):
            raise ValueError(f"Base distance out of range: {base_distance}")

        vectors = {}
        for offset, instruction in enumerate(DEFAULT_ORDER):
            distance = base_distance + offset
            vectors[instruction] = DeltaVector(distance, distance, distance, distance)
        return cls(vectors)

    def vector_for(self, instruction):
        return self._by_instruction[instruction]

    def instruction_for(self, delta):
        """
        Look up the instruction a pixel delta encodes

        Raises:
            UnknownDeltaError: If no instruction uses this delta
        """
        try:
            return self._by_delta[normalize_delta(delta)]
        except KeyError:
            raise UnknownDeltaError(delta) from None

    @staticmethod
    def is_continuation(delta):
        return normalize_delta(delta) == ZERO_DELTA

    def min_separation(self):
        """Smallest per-channel distance between any two table entries, wraparound aware"""
        keys = list(self._by_delta)
        best = min(max(_channel_distance(c, 0) for c in key) for key in keys)
        for a, b in combinations(keys, 2):
            best = min(best, max(_channel_distance(x, y) for x, y in zip(a, b)))
        return best

    def __len__(self):
        return len(self._by_instruction)

    def __eq__(self, other):
        if not isinstance(other, DeltaTable):
            return NotImplemented
        return dict(self._by_instruction) == dict(other._by_instruction)

    def __hash__(self):
        return hash(frozenset(self._by_instruction.items()))

    def __repr__(self):
        entries = ', '.join(f"{i.name}={tuple(v)}" for i, v in self._by_instruction.items())
        return f"DeltaTable({entries})"
