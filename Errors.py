### Brainfreeze Exception classes ###
class BrainfreezeError(Exception):
    """Base class for every error raised by the image program tools."""
    pass


### Carrier image errors ###
class ImageFormatError(BrainfreezeError):
    """Raised when the image format is unsupported or unrecognized."""
    def __init__(self, format_found, message=""):
        self.format_found = format_found
        self.message = message or f"Unsupported image format: {format_found}"
        super().__init__(self.message)


class ImageCorruptedError(BrainfreezeError):
    """Cannot parse image - it may be corrupted"""
    pass


class CompressionDetectedError(BrainfreezeError):
    """Compressed pixel data, only uncompressed BMP is supported"""
    pass


class FileReadError(BrainfreezeError):
    """File could not be read"""
    def __init__(self, filename, reason=""):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Cannot read {filename}: {reason}" if reason else f"Cannot read {filename}")


class FileWriteError(BrainfreezeError):
    """File could not be written"""
    def __init__(self, filename, reason=""):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Cannot write {filename}: {reason}" if reason else f"Cannot write {filename}")


### Codec errors ###
class InsufficientCapacityError(BrainfreezeError):
    """Image too small for program"""
    def __init__(self, required, available):
        self.required = required
        self.available = available
        super().__init__(f"Need {required} pixels, have {available} pixels")


class UnknownDeltaError(BrainfreezeError):
    """Delta vector is not assigned to any instruction"""
    def __init__(self, delta):
        self.delta = tuple(delta)
        super().__init__(f"No instruction is encoded by delta {self.delta}")


class CorruptStreamError(BrainfreezeError):
    """Pixel stream does not decode to a program"""
    def __init__(self, index, message, delta=None):
        self.index = index
        self.delta = tuple(delta) if delta is not None else None
        self.message = message
        super().__init__(f"Corrupt program stream at pixel {index}: {message}")


### Source and program errors ###
class LexError(BrainfreezeError):
    """Program source holds characters outside the instruction set"""
    def __init__(self, errors):
        self.errors = list(errors)
        details = "; ".join(f"{position}: {message}" for position, message in self.errors)
        super().__init__(f"{len(self.errors)} lexing error(s): {details}")


class UnmatchedBracketError(BrainfreezeError):
    """Loop brackets are not balanced"""
    def __init__(self, position, bracket):
        self.position = position
        self.bracket = bracket
        super().__init__(f"Unmatched '{bracket}' at instruction {position}")


### Execution errors ###
class ExecutionError(BrainfreezeError):
    """Program fault while running"""
    def __init__(self, instruction_index, message):
        self.instruction_index = instruction_index
        super().__init__(f"{message} (instruction {instruction_index})")


class TapeUnderflowError(ExecutionError):
    """Data pointer moved before the first cell"""
    def __init__(self, instruction_index):
        super().__init__(instruction_index, "Data pointer moved left of cell 0")


class StepLimitExceededError(BrainfreezeError):
    """Safety fuse, not a fault of the program itself"""
    def __init__(self, limit, instruction_index):
        self.limit = limit
        self.instruction_index = instruction_index
        super().__init__(f"Step limit of {limit} exceeded at instruction {instruction_index}")


### Workflow errors ###
class InjectionError(BrainfreezeError):
    """Unexpected failure while injecting a program"""
    pass


class ExtractionError(BrainfreezeError):
    """Unexpected failure while extracting or running a program"""
    pass
