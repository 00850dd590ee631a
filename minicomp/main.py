import argparse
import logging
import sys

from . import __version__
from .compyler import compile_program
from .errors import CompileError
from .finisher import convert_asm_to_exe, convert_ir_to_asm, make_temp_output, verify_ir
from .parser import parse
from .reader import fetch_code

log = logging.getLogger("minicomp")


class ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with status 1 like every other failure."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_arg_parser():
    parser = ArgumentParser(
        prog="minicomp",
        description="Compile a let/print program to LLVM IR",
    )
    parser.add_argument("source", help="source file to compile")
    parser.add_argument("-o", "--output", help="write the IR to this file instead of stdout")
    parser.add_argument("--verify", action="store_true", help="run the LLVM verifier on the IR")
    parser.add_argument("--exe", metavar="PATH", help="also build an executable with llc and clang")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="log progress (twice for debug)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbosity):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(name)s %(levelname)s %(message)s", stream=sys.stderr)


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        module = compile_program(parse(fetch_code(args.source)))
        if args.verify:
            verify_ir(module)

        if args.exe:
            ll_path = args.exe + ".ll"
            obj_path = args.exe + ".o"
            make_temp_output(module, ll_path)
            convert_ir_to_asm(ll_path, obj_path)
            convert_asm_to_exe(obj_path, args.exe)

        if args.output:
            make_temp_output(module, args.output)
        else:
            sys.stdout.write(str(module))
    except CompileError as exc:
        log.debug("Compilation failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
