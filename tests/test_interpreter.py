import io

import pytest

from Errors import ExecutionError, StepLimitExceededError, TapeUnderflowError
from instructions import Instruction
from interpreter import Interpreter, Tape, run_program
from lexer import tokenize
from program_loader import Program, load_program


def test_five_increments_then_output():
    instructions = [Instruction.INCREMENT] * 5 + [Instruction.OUTPUT, Instruction.END_OF_PROGRAM]
    assert run_program(instructions) == b'\x05'


def test_clearing_loop_runs_once_per_unit():
    interpreter = Interpreter(load_program(tokenize("[-]")))
    interpreter.tape.write(3)

    interpreter.run()

    # [ - ] per pass, three passes
    assert interpreter.steps == 9
    assert interpreter.tape.read() == 0


def test_loop_skipped_when_cell_is_zero():
    assert run_program(tokenize("[.]+.")) == b'\x01'


def test_hello_world(hello_world):
    assert run_program(tokenize(hello_world)) == b'Hello World!\n'


def test_cells_wrap():
    assert run_program(tokenize("-.")) == b'\xff'
    assert run_program(tokenize("+" * 256 + ".")) == b'\x00'


def test_tape_underflow_is_an_error_by_default():
    with pytest.raises(TapeUnderflowError) as excinfo:
        run_program(tokenize("+<"))
    assert excinfo.value.instruction_index == 1
    assert isinstance(excinfo.value, ExecutionError)


def test_tape_underflow_clamp_policy():
    assert run_program(tokenize("<<+."), underflow_policy='clamp') == b'\x01'


def test_input_is_read_byte_by_byte():
    assert run_program(tokenize(",.,."), b'AB') == b'AB'
    assert run_program(tokenize(",[.,]"), "hi") == b'hi'


def test_exhausted_input_stores_zero():
    assert run_program(tokenize("+,."), b'') == b'\x00'


def test_exhausted_input_keep_policy():
    assert run_program(tokenize("+,."), b'', eof_policy='keep') == b'\x01'


def test_input_from_file_like_and_iterable():
    assert run_program(tokenize(",.,."), io.BytesIO(b'xy')) == b'xy'
    assert run_program(tokenize(",.,."), [65, 66]) == b'AB'


def test_input_consumed_counter():
    interpreter = Interpreter(tokenize(",,,"), input_source=b'ab')
    interpreter.run()
    assert interpreter.input_consumed == 2


def test_step_limit():
    with pytest.raises(StepLimitExceededError) as excinfo:
        run_program(tokenize("+[]"), step_limit=100)

    assert excinfo.value.limit == 100
    assert not isinstance(excinfo.value, ExecutionError)


def test_step_limit_is_inclusive():
    assert run_program(tokenize("+++."), step_limit=4) == b'\x03'
    with pytest.raises(StepLimitExceededError):
        run_program(tokenize("+++."), step_limit=3)


def test_tape_grows_on_demand():
    interpreter = Interpreter(tokenize(">" * 1000 + "+."), tape_size=8)
    interpreter.run()

    assert bytes(interpreter.output) == b'\x01'
    assert interpreter.tape.pointer == 1000
    assert len(interpreter.tape) > 1000


def test_output_sinks():
    program = tokenize("++.")

    buffer = bytearray()
    Interpreter(program, output_sink=buffer).run()
    assert buffer == b'\x02'

    stream = io.BytesIO()
    Interpreter(program, output_sink=stream).run()
    assert stream.getvalue() == b'\x02'

    chunks = []
    Interpreter(program, output_sink=chunks.append).run()
    assert chunks == [b'\x02']


def test_rejects_unknown_policies():
    with pytest.raises(ValueError):
        Interpreter(tokenize(""), underflow_policy='wrap')
    with pytest.raises(ValueError):
        Interpreter(tokenize(""), eof_policy='stop')


def test_step_after_halt_is_a_no_op():
    interpreter = Interpreter(tokenize("+"))
    interpreter.run()
    assert interpreter.halted
    assert interpreter.step() is False
    assert interpreter.steps == 1


def test_tape_snapshot():
    tape = Tape(16)
    tape.increment()
    tape.move_right()
    tape.move_right()
    tape.move_right()
    tape.write(7)
    tape.move_left()

    assert tape.snapshot() == b'\x01\x00\x00\x07'
    assert tape.snapshot(limit=2) == b'\x01\x00'


def test_describe_state():
    interpreter = Interpreter(tokenize("+++>+."))
    interpreter.run()

    assert interpreter.describe_state() == repr('\x01')
    dump = interpreter.describe_state(verbose=True)
    assert "Pointer        :\t 1" in dump
    assert "[3, 1]" in dump


def test_text_stream_input_matches_text_input():
    interpreter = Interpreter(tokenize(",.,."), input_source=io.StringIO("é"))
    interpreter.run()

    assert bytes(interpreter.output) == b'\xc3\xa9'
    assert bytes(interpreter.output) == run_program(tokenize(",.,."), "é")
    assert interpreter.input_consumed == 2


def test_hand_built_program_without_end_marker_is_rejected():
    with pytest.raises(ValueError):
        Interpreter(Program([Instruction.INCREMENT], {}))


def test_tape_move_left_reports_cell_zero():
    tape = Tape(4)
    assert tape.move_left() is False
    assert tape.pointer == 0

    tape.move_right()
    assert tape.move_left() is True
    assert tape.pointer == 0
