"""
Extraction and Run Module for image programs
Recovers programs hidden in carrier images and executes them
"""

import sys

from Constants import *
from Errors import *
from image_io import load_carrier
from interpreter import Interpreter
from lexer import tokenize
from program_loader import load_program
from stego_core import ProgramCodec

# =============================================================================
# RUN WORKFLOW
# =============================================================================

class ProgramRunner:
    """
    Main runner class
    Extracts, loads and executes programs with configurable engine policies
    """

    def __init__(self, verbose=False, delta_table=None, step_limit=DEFAULT_STEP_LIMIT,
                 underflow_policy=UNDERFLOW_ERROR, eof_policy=EOF_ZERO):
        """
        Initialize runner

        Args:
            verbose: Whether to print progress information
            delta_table: DeltaTable the image was written with
            step_limit: Maximum instructions per run (None for unbounded)
            underflow_policy: 'error' or 'clamp'
            eof_policy: 'zero' or 'keep'
        """
        self.verbose = verbose
        self.codec = ProgramCodec(delta_table)
        self.step_limit = step_limit
        self.underflow_policy = underflow_policy
        self.eof_policy = eof_policy
        self.progress_callback = None
        self.last_interpreter = None

    def _log(self, message):
        """Log message if verbose mode is enabled"""
        if self.verbose:
            print(f"[RUN] {message}", file=sys.stderr)

    def _update_progress(self, stage, percentage, message=""):
        """Update progress if callback is set"""
        if self.progress_callback:
            self.progress_callback(stage, percentage, message)

    def extract_program(self, input_image, origin=DEFAULT_ORIGIN):
        """
        Recover the instruction sequence hidden in an image

        Returns:
            List of Instruction ending with END_OF_PROGRAM
        """
        try:
            self._log(f"Reading carrier: {input_image}")
            self._update_progress("validation", 20, "Reading carrier image")

            carrier = load_carrier(input_image)
            self._log(f"Image: {carrier.width} x {carrier.height} pixels ({carrier.image_format})")

            self._update_progress("decoding", 50, "Decoding pixel deltas")
            try:
                instructions = self.codec.extract(carrier.pixels, origin)
            except CorruptStreamError as e:
                if e.index < carrier.total_pixels:
                    x, y = carrier.coordinates(e.index)
                    self._log(f"Decoding failed at pixel ({x}, {y})")
                raise

            self._log(f"Recovered {len(instructions) - 1} instructions")
            return instructions

        except BrainfreezeError:
            raise
        except Exception as e:
            raise ExtractionError(f"Extraction failed: {e}") from e

    def run_image(self, input_image, input_data=b'', output=None, origin=DEFAULT_ORIGIN):
        """
        Extract and execute the program hidden in an image

        Args:
            input_image: Path to the carrier image
            input_data: Input source for the program (bytes, text, file-like or iterable)
            output: Output sink (None captures into details['output'])
            origin: Index of the anchor pixel

        Returns:
            Tuple: (success, details)
        """
        instructions = self.extract_program(input_image, origin)
        success, details = self.run_instructions(instructions, input_data, output)
        details['input_file'] = input_image
        details['origin'] = origin
        return success, details

    def run_source(self, source, input_data=b'', output=None, strict=False):
        """Execute program text directly, no image involved"""
        self._update_progress("lexing", 20, "Lexing program")
        instructions = tokenize(source, strict=strict)
        return self.run_instructions(instructions, input_data, output)

    def run_instructions(self, instructions, input_data=b'', output=None):
        """
        Load and execute an instruction sequence

        Returns:
            Tuple: (success, details)
        """
        self._update_progress("loading", 70, "Resolving loop brackets")
        program = load_program(instructions)
        self._log(f"Loaded program: {len(program) - 1} instructions, {len(program.loop_pairs)} loops")

        interpreter = Interpreter(
            program,
            input_source=input_data,
            output_sink=output,
            step_limit=self.step_limit,
            underflow_policy=self.underflow_policy,
            eof_policy=self.eof_policy,
        )
        self.last_interpreter = interpreter

        self._update_progress("executing", 80, "Running program")
        try:
            steps = interpreter.run()
        except (ExecutionError, StepLimitExceededError) as e:
            self._log(f"Execution stopped after {interpreter.steps:,} steps: {e}")
            raise

        self._log(f"Program finished after {steps:,} steps")
        self._update_progress("complete", 100, "Run complete")

        return True, {
            'success': True,
            'instruction_count': len(program),
            'loop_count': len(program.loop_pairs),
            'steps': steps,
            'output': bytes(interpreter.output),
            'input_consumed': interpreter.input_consumed,
            'tape_pointer': interpreter.tape.pointer,
        }

    def describe_last_state(self, verbose=True):
        """Machine state of the most recent run, if any"""
        if self.last_interpreter is None:
            return "No program has been run"
        return self.last_interpreter.describe_state(verbose)
