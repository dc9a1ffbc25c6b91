"""
Execution engine for loaded image programs
Tape machine with byte cells, bracket jumps resolved through the Program jump table
"""

from Constants import (
    DEFAULT_STEP_LIMIT, EOF_POLICIES, EOF_ZERO,
    TAPE_INITIAL_SIZE, UNDERFLOW_ERROR, UNDERFLOW_POLICIES,
)
from Errors import StepLimitExceededError, TapeUnderflowError
from instructions import Instruction
from program_loader import Program, load_program


# =============================================================================
# TAPE
# =============================================================================

class Tape:
    """Growable row of unsigned byte cells with a single data pointer"""

    def __init__(self, initial_size=TAPE_INITIAL_SIZE):
        self.cells = bytearray(max(1, initial_size))
        self.pointer = 0

    def read(self):
        return self.cells[self.pointer]

    def write(self, value):
        self.cells[self.pointer] = value & 0xFF

    def increment(self):
        self.cells[self.pointer] = (self.cells[self.pointer] + 1) & 0xFF

    def decrement(self):
        self.cells[self.pointer] = (self.cells[self.pointer] - 1) & 0xFF

    def move_right(self):
        self.pointer += 1
        if self.pointer >= len(self.cells):
            self.cells.extend(bytes(len(self.cells)))

    def move_left(self):
        """Returns False instead of moving when already at cell 0"""
        if self.pointer == 0:
            return False
        self.pointer -= 1
        return True

    def snapshot(self, limit=None):
        """Cells up to the last non-zero cell or the pointer, whichever is further"""
        end = self.pointer + 1
        for i in range(len(self.cells) - 1, self.pointer, -1):
            if self.cells[i]:
                end = i + 1
                break
        if limit is not None:
            end = min(end, limit)
        return bytes(self.cells[:end])

    def __len__(self):
        return len(self.cells)


# =============================================================================
# I/O ADAPTERS
# =============================================================================

def _make_reader(source):
    """Return a callable yielding the next input byte or None when exhausted"""
    if source is None:
        return lambda: None

    if isinstance(source, str):
        source = source.encode('utf-8')

    if isinstance(source, (bytes, bytearray, memoryview)):
        iterator = iter(bytes(source))
        return lambda: next(iterator, None)

    if hasattr(source, 'read'):
        # text streams hand back whole characters, which may be several bytes
        pending = bytearray()

        def read():
            if not pending:
                data = source.read(1)
                if not data:
                    return None
                if isinstance(data, str):
                    data = data.encode('utf-8')
                pending.extend(data)
            return pending.pop(0)
        return read

    iterator = iter(source)
    return lambda: next(iterator, None)


def _make_writer(sink, captured):
    """Return a callable accepting one output byte value"""
    if sink is None:
        return captured.append

    if isinstance(sink, bytearray):
        return sink.append

    if hasattr(sink, 'write'):
        return lambda value: sink.write(bytes((value,)))

    if callable(sink):
        return lambda value: sink(bytes((value,)))

    raise TypeError(f"Unsupported output sink: {type(sink).__name__}")


# =============================================================================
# INTERPRETER
# =============================================================================

class Interpreter:
    """
    Runs one Program against an input source and output sink

    Policies:
        underflow_policy: 'error' raises TapeUnderflowError when moving left
                          of cell 0, 'clamp' leaves the pointer at 0
        eof_policy: 'zero' stores 0 on exhausted input, 'keep' leaves the cell
        step_limit: Maximum instructions executed before StepLimitExceededError
    """

    def __init__(self, program, input_source=None, output_sink=None,
                 step_limit=DEFAULT_STEP_LIMIT, underflow_policy=UNDERFLOW_ERROR,
                 eof_policy=EOF_ZERO, tape_size=TAPE_INITIAL_SIZE):
        if underflow_policy not in UNDERFLOW_POLICIES:
            raise ValueError(f"Unknown underflow policy: {underflow_policy}")
        if eof_policy not in EOF_POLICIES:
            raise ValueError(f"Unknown EOF policy: {eof_policy}")
        if step_limit is not None and step_limit < 0:
            raise ValueError(f"Step limit must be non-negative, got {step_limit}")

        if not isinstance(program, Program):
            program = load_program(program)

        self.program = program
        self.step_limit = step_limit
        self.underflow_policy = underflow_policy
        self.eof_policy = eof_policy

        self.tape = Tape(tape_size)
        self.instruction_pointer = 0
        self.steps = 0
        self.input_consumed = 0
        self.halted = False

        self.output = bytearray()
        self._read = _make_reader(input_source)
        self._write = _make_writer(output_sink, self.output)

    def step(self):
        """
        Execute one instruction

        Returns:
            False once END_OF_PROGRAM is reached, True otherwise
        """
        if self.halted:
            return False

        ip = self.instruction_pointer
        instruction = self.program.instructions[ip]

        if instruction is Instruction.END_OF_PROGRAM:
            self.halted = True
            return False

        if self.step_limit is not None and self.steps >= self.step_limit:
            raise StepLimitExceededError(self.step_limit, ip)
        self.steps += 1

        tape = self.tape
        next_ip = ip + 1

        if instruction is Instruction.MOVE_RIGHT:
            tape.move_right()
        elif instruction is Instruction.MOVE_LEFT:
            if not tape.move_left() and self.underflow_policy == UNDERFLOW_ERROR:
                raise TapeUnderflowError(ip)
        elif instruction is Instruction.INCREMENT:
            tape.increment()
        elif instruction is Instruction.DECREMENT:
            tape.decrement()
        elif instruction is Instruction.OUTPUT:
            self._write(tape.read())
        elif instruction is Instruction.INPUT:
            value = self._read()
            if value is None:
                if self.eof_policy == EOF_ZERO:
                    tape.write(0)
            else:
                self.input_consumed += 1
                tape.write(value)
        elif instruction is Instruction.LOOP_OPEN:
            if tape.read() == 0:
                next_ip = self.program.jump_target(ip)
        elif instruction is Instruction.LOOP_CLOSE:
            if tape.read() != 0:
                next_ip = self.program.jump_target(ip)

        self.instruction_pointer = next_ip
        return True

    def run(self):
        """Run until END_OF_PROGRAM; returns the number of executed steps"""
        while self.step():
            pass
        return self.steps

    def describe_state(self, verbose=False):
        """Readable dump of the machine state"""
        output = bytes(self.output)
        text = output.decode('utf-8', errors='replace')

        if not verbose:
            return repr(text)

        lines = [
            f"Memory         :\t {list(self.tape.snapshot())}",
            f"Pointer        :\t {self.tape.pointer}",
            f"Instruction    :\t {self.instruction_pointer} / {len(self.program)}",
            f"Steps          :\t {self.steps}",
            f"Input consumed :\t {self.input_consumed}",
            f"Output         :\t {list(output)}",
            f"Output (UTF-8) :\t {text!r}",
        ]
        return "\n".join(lines)


def run_program(program, input_data=b'', **options):
    """
    Run a program to completion and return what it printed

    Args:
        program: Program or iterable of Instruction
        input_data: Bytes (or text) fed to INPUT instructions
        **options: Interpreter keyword arguments

    Returns:
        Output bytes
    """
    interpreter = Interpreter(program, input_source=input_data, **options)
    interpreter.run()
    return bytes(interpreter.output)
