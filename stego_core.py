"""
Core codec for hiding programs in pixel deltas
Pure Python implementation - the only image dependency lives in image_io
"""

import math
from collections import namedtuple
from itertools import islice

from Constants import CHANNELS, CHANNEL_MODULUS, DEFAULT_ORIGIN
from Errors import CorruptStreamError, InsufficientCapacityError, UnknownDeltaError
from delta_table import DeltaTable, DeltaVector
from instructions import Instruction


EncodedRun = namedtuple('EncodedRun', ['instruction', 'repeat_count'])

# =============================================================================
# RUN-LENGTH STACKING
# =============================================================================

def compress_runs(instructions):
    """
    Collapse consecutive identical stackable instructions into runs

    Args:
        instructions: Iterable of Instruction

    Returns:
        List of EncodedRun, non-stackable instructions always have repeat_count 1
    """
    runs = []
    for instruction in instructions:
        if runs and instruction.is_stackable and runs[-1].instruction is instruction:
            last = runs[-1]
            runs[-1] = EncodedRun(instruction, last.repeat_count + 1)
        else:
            runs.append(EncodedRun(instruction, 1))
    return runs


def expand_runs(runs):
    """Expand runs back into the flat instruction sequence"""
    instructions = []
    for run in runs:
        instructions.extend([run.instruction] * run.repeat_count)
    return instructions


def required_pixels(instructions):
    """Pixels needed to encode a program: one per run plus its continuations"""
    return sum(run.repeat_count for run in compress_runs(instructions))


# =============================================================================
# PIXEL ARITHMETIC
# =============================================================================

def as_pixel(value):
    """Validate and normalize a pixel into an (r, g, b, a) tuple"""
    pixel = tuple(value)
    if len(pixel) != CHANNELS:
        raise ValueError(f"Pixel must have {CHANNELS} channels, got {len(pixel)}")
    for channel in pixel:
        if not isinstance(channel, int) or not 0 <= channel < CHANNEL_MODULUS:
            raise ValueError(f"Channel value out of range: {channel!r}")
    return pixel


def apply_delta(pixel, delta):
    """Add a delta to a pixel, each channel wrapping modulo 256"""
    return tuple((channel + d) % CHANNEL_MODULUS for channel, d in zip(pixel, delta))


def pixel_delta(current, previous):
    """Channel-wise difference current - previous, modulo 256"""
    return DeltaVector(*((c - p) % CHANNEL_MODULUS for c, p in zip(current, previous)))


def _checked_program(instructions):
    instructions = list(instructions)
    if not instructions or instructions[-1] is not Instruction.END_OF_PROGRAM:
        raise ValueError("Program must be terminated by END_OF_PROGRAM")
    if Instruction.END_OF_PROGRAM in instructions[:-1]:
        raise ValueError("END_OF_PROGRAM may only appear as the last instruction")
    return instructions


# =============================================================================
# ENCODING / DECODING
# =============================================================================

class ProgramCodec:
    """
    Encodes instruction sequences as chains of pixel deltas

    Each run emits one pixel offset from its predecessor by the run's delta,
    then repeat_count - 1 identical pixels (zero delta continuations).
    """

    def __init__(self, delta_table=None):
        self.delta_table = delta_table if delta_table is not None else DeltaTable.uniform()

    def encode(self, instructions, base_pixel):
        """
        Encode a program into pixels

        Args:
            instructions: Instructions terminated by END_OF_PROGRAM
            base_pixel: Pixel the first delta is applied to

        Returns:
            List of (r, g, b, a) tuples, one per instruction
        """
        instructions = _checked_program(instructions)
        previous = as_pixel(base_pixel)
        pixels = []

        for run in compress_runs(instructions):
            previous = apply_delta(previous, self.delta_table.vector_for(run.instruction))
            pixels.append(previous)
            pixels.extend([previous] * (run.repeat_count - 1))

        return pixels

    def decode(self, pixels, base_pixel, start_index=0):
        """
        Decode pixels back into a program

        Args:
            pixels: Iterable of pixels following base_pixel
            base_pixel: Pixel preceding the first encoded pixel
            start_index: Index of the first pixel, used in error reports

        Returns:
            List of Instruction ending with END_OF_PROGRAM

        Raises:
            CorruptStreamError: Unknown delta, stray continuation,
                                or no end-of-program marker
        """
        previous = as_pixel(base_pixel)
        runs = []
        index = start_index

        for pixel in pixels:
            pixel = as_pixel(pixel)
            delta = pixel_delta(pixel, previous)
            previous = pixel

            if self.delta_table.is_continuation(delta):
                if not runs or not runs[-1].instruction.is_stackable:
                    raise CorruptStreamError(
                        index, "continuation pixel does not follow a stackable instruction", delta
                    )
                last = runs[-1]
                runs[-1] = EncodedRun(last.instruction, last.repeat_count + 1)
            else:
                try:
                    instruction = self.delta_table.instruction_for(delta)
                except UnknownDeltaError as e:
                    raise CorruptStreamError(index, "delta does not encode an instruction", delta) from e

                runs.append(EncodedRun(instruction, 1))
                if instruction is Instruction.END_OF_PROGRAM:
                    return expand_runs(runs)

            index += 1

        raise CorruptStreamError(index, "stream ended before the end-of-program marker")

    # =========================================================================
    # CARRIER OPERATIONS
    # =========================================================================

    def capacity(self, pixels, origin=DEFAULT_ORIGIN):
        """Instructions that fit after the anchor pixel at origin"""
        return max(0, len(pixels) - origin - 1)

    def embed(self, pixels, instructions, origin=DEFAULT_ORIGIN):
        """
        Write a program into a carrier pixel list in place

        The pixel at origin is the anchor and stays untouched; encoded
        pixels overwrite origin + 1 onward. Nothing is written on failure.

        Returns:
            Number of pixels overwritten

        Raises:
            InsufficientCapacityError: If the carrier is too small
        """
        if origin < 0:
            raise ValueError(f"Origin must be non-negative, got {origin}")

        instructions = _checked_program(instructions)
        required = required_pixels(instructions)
        available = self.capacity(pixels, origin)

        if required > available:
            raise InsufficientCapacityError(required=required, available=available)

        encoded = self.encode(instructions, pixels[origin])
        start = origin + 1
        pixels[start:start + len(encoded)] = encoded
        return len(encoded)

    def extract(self, pixels, origin=DEFAULT_ORIGIN):
        """
        Read a program out of a carrier pixel list

        Returns:
            List of Instruction ending with END_OF_PROGRAM
        """
        if origin < 0:
            raise ValueError(f"Origin must be non-negative, got {origin}")
        if origin >= len(pixels):
            raise CorruptStreamError(origin, "carrier has no anchor pixel at the origin")

        return self.decode(islice(pixels, origin + 1, None), pixels[origin], start_index=origin + 1)


# =============================================================================
# ANALYSIS
# =============================================================================

def estimate_visual_impact(original_pixels, modified_pixels):
    """
    Estimate visual impact of an embedded program

    Args:
        original_pixels: Carrier pixels before embedding
        modified_pixels: Carrier pixels after embedding

    Returns:
        Dictionary with impact metrics
    """
    if len(original_pixels) != len(modified_pixels):
        raise ValueError("Pixel arrays have different lengths")

    changed_pixels = 0
    max_change = 0
    squared_error = 0

    for before, after in zip(original_pixels, modified_pixels):
        if before == after:
            continue
        changed_pixels += 1
        for a, b in zip(before, after):
            change = abs(a - b)
            squared_error += change * change
            max_change = max(max_change, change)

    total_pixels = len(original_pixels)
    samples = total_pixels * CHANNELS
    mse = squared_error / samples if samples else 0.0
    psnr = 10 * math.log10((255 ** 2) / mse) if mse > 0 else float('inf')

    return {
        'total_pixels': total_pixels,
        'changed_pixels': changed_pixels,
        'change_percentage': (changed_pixels / total_pixels) * 100 if total_pixels else 0.0,
        'max_channel_change': max_change,
        'mean_squared_error': mse,
        'estimated_psnr_db': psnr,
        'quality_assessment': _assess_quality(psnr),
    }


def _assess_quality(psnr):
    """Assess image quality based on PSNR"""
    if psnr == float('inf'):
        return "Perfect (no changes)"
    elif psnr >= 50:
        return "Excellent (imperceptible)"
    elif psnr >= 40:
        return "Good (barely perceptible)"
    elif psnr >= 30:
        return "Fair (slightly noticeable)"
    elif psnr >= 20:
        return "Poor (noticeable)"
    else:
        return "Bad (very noticeable)"
