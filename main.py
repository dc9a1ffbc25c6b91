"""
Command line interface for hiding programs in images and running them
"""

import argparse
import sys

from Constants import *
from Errors import BrainfreezeError
from decode import ProgramRunner
from delta_table import DeltaTable
from encode import ProgramInjector
from image_io import load_carrier
from lexer import render_source
from stego_core import ProgramCodec
from utils import read_file_bytes, read_text_file


def _add_table_arguments(parser):
    parser.add_argument('--origin', type=int, default=DEFAULT_ORIGIN,
                        help='Index of the anchor pixel (default: %(default)s)')
    parser.add_argument('--base-distance', type=int, default=MINIMUM_PIXEL_DISTANCE,
                        help='Smallest channel delta of the instruction table (default: %(default)s)')


def _add_engine_arguments(parser):
    source = parser.add_mutually_exclusive_group()
    source.add_argument('-i', '--input', help='Program input as text (default: read stdin)')
    source.add_argument('--input-file', help='File whose bytes are the program input')
    parser.add_argument('--step-limit', type=int, default=DEFAULT_STEP_LIMIT,
                        help='Abort after this many instructions')
    parser.add_argument('--underflow', choices=UNDERFLOW_POLICIES, default=UNDERFLOW_ERROR,
                        help='Moving left of cell 0: fail or stay at 0 (default: %(default)s)')
    parser.add_argument('--eof', choices=EOF_POLICIES, default=EOF_ZERO,
                        help='Input when exhausted: store 0 or keep the cell (default: %(default)s)')
    parser.add_argument('--dump', action='store_true', help='Print the final machine state to stderr')


def build_parser():
    parser = argparse.ArgumentParser(
        prog='brainfreeze',
        description='Hide tape-machine programs in image pixels and run them'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose mode')
    commands = parser.add_subparsers(dest='command', required=True)

    inject = commands.add_parser('inject', help='Embed a program into an image')
    inject.add_argument('input', help='Carrier image (BMP or PNG)')
    inject.add_argument('program', help='Program source file')
    inject.add_argument('output', help='Output image (.bmp or .png)')
    inject.add_argument('--strict', action='store_true', help='Reject comment characters in the source')
    inject.add_argument('--no-verify', action='store_true', help='Skip re-reading the written image')
    _add_table_arguments(inject)

    run = commands.add_parser('run', help='Run the program hidden in an image')
    run.add_argument('image', help='Image with an embedded program')
    _add_table_arguments(run)
    _add_engine_arguments(run)

    extract = commands.add_parser('extract', help='Print the program hidden in an image')
    extract.add_argument('image', help='Image with an embedded program')
    extract.add_argument('--width', type=int, default=None, help='Wrap source lines at this width')
    _add_table_arguments(extract)

    execute = commands.add_parser('exec', help='Run a program source file directly')
    execute.add_argument('program', nargs='?', default=None,
                         help='Program source file (omit for an interactive prompt)')
    execute.add_argument('--strict', action='store_true', help='Reject comment characters in the source')
    _add_engine_arguments(execute)

    info = commands.add_parser('info', help='Show carrier image details and capacity')
    info.add_argument('image', help='Carrier image')
    info.add_argument('--origin', type=int, default=DEFAULT_ORIGIN,
                      help='Index of the anchor pixel (default: %(default)s)')

    return parser


def _program_input(args):
    if args.input is not None:
        return args.input.encode('utf-8')
    if args.input_file is not None:
        return read_file_bytes(args.input_file)
    return sys.stdin.buffer


def _make_runner(args, delta_table=None):
    return ProgramRunner(
        verbose=args.verbose,
        delta_table=delta_table,
        step_limit=args.step_limit,
        underflow_policy=args.underflow,
        eof_policy=args.eof,
    )


def _execute(runner, args, run):
    stdout = sys.stdout.buffer
    try:
        run(stdout)
    finally:
        stdout.flush()
        if args.dump:
            print(runner.describe_last_state(verbose=True), file=sys.stderr)


def cmd_inject(args):
    injector = ProgramInjector(
        verbose=args.verbose,
        delta_table=DeltaTable.uniform(args.base_distance),
        strict=args.strict,
    )
    success, details = injector.inject_file(
        args.input, args.program, args.output,
        origin=args.origin, verify=not args.no_verify
    )
    print(injector.get_injection_summary(details))
    return 0


def cmd_run(args):
    runner = _make_runner(args, DeltaTable.uniform(args.base_distance))
    program_input = _program_input(args)
    _execute(runner, args, lambda out: runner.run_image(args.image, program_input, out, args.origin))
    return 0


def cmd_extract(args):
    runner = ProgramRunner(verbose=args.verbose, delta_table=DeltaTable.uniform(args.base_distance))
    instructions = runner.extract_program(args.image, args.origin)
    print(render_source(instructions, args.width))
    return 0


def _prompt_input(args):
    # stdin carries the program lines, so input only comes from the flags
    if args.input is not None:
        return args.input.encode('utf-8')
    if args.input_file is not None:
        return read_file_bytes(args.input_file)
    return b''


def run_prompt(args):
    """Read program lines from stdin and run each one on a fresh machine"""
    runner = _make_runner(args)
    program_input = _prompt_input(args)

    while True:
        sys.stdout.write("> ")
        sys.stdout.flush()
        line = sys.stdin.readline()
        if not line:
            break
        line = line.rstrip("\n")
        if not line.strip():
            continue

        try:
            _, details = runner.run_source(line, program_input, strict=args.strict)
        except (BrainfreezeError, ValueError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            continue

        text = details['output'].decode('utf-8', errors='replace')
        if text and not text.endswith("\n"):
            text += "\n"
        sys.stdout.write(text)
        if args.dump:
            print(runner.describe_last_state(verbose=True), file=sys.stderr)

    print()
    return 0


def cmd_exec(args):
    if args.program is None:
        return run_prompt(args)

    runner = _make_runner(args)
    source = read_text_file(args.program)
    program_input = _program_input(args)
    _execute(runner, args, lambda out: runner.run_source(source, program_input, out, strict=args.strict))
    return 0


def cmd_info(args):
    carrier = load_carrier(args.image)
    info = carrier.get_image_info()
    capacity = ProgramCodec().capacity(carrier.pixels, args.origin)

    print("=" * 50)
    print("Carrier Image Information")
    print("=" * 50)
    print(f"Format: {info['format']}")
    print(f"Dimensions: {info['width']} x {info['height']}")
    if 'bit_depth' in info:
        print(f"Bit depth: {info['bit_depth']}-bit")
        print(f"Orientation: {'Top-down' if info['is_top_down'] else 'Bottom-up'}")
    print("-" * 50)
    print(f"Anchor pixel: {args.origin}")
    print(f"Program capacity: {capacity:,} instructions (including end marker)")
    print("=" * 50)
    return 0


COMMANDS = {
    'inject': cmd_inject,
    'run': cmd_run,
    'extract': cmd_extract,
    'exec': cmd_exec,
    'info': cmd_info,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return COMMANDS[args.command](args)
    except (BrainfreezeError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
