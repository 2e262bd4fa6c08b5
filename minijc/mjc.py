import sys
import argparse

from . import __version__
from .lexer import run_lexical_analysis
from .parser import build_ast, write_parser_output
from .type_checker import run_type_checker


def display_version():
    """Prints the compiler version information."""
    print("MiniJ compiler front end")
    print(f"Version {__version__}")


def main(argv=None):
    """Parses command line arguments and runs the correct compiler phase."""
    parser = argparse.ArgumentParser(
        prog="mjc",
        description="Front end and semantic analyzer for the MiniJ language."
    )

    mode_group = parser.add_mutually_exclusive_group(required=True)
    mode_group.add_argument('-1', dest='mode1', action='store_true', help="Phase 1: Version")
    mode_group.add_argument('-2', dest='mode2', action='store_true', help="Phase 2: Lexer")
    mode_group.add_argument('-3', dest='mode3', action='store_true', help="Phase 3: Parser")
    mode_group.add_argument('-4', dest='mode4', action='store_true', help="Phase 4: Type Checker")
    parser.add_argument('infile', nargs='?', default=None, help="The input source file.")

    args = parser.parse_args(argv)

    if args.mode1:
        display_version()
        return

    if not args.infile:
        sys.exit("Error: Input file required.")

    if args.mode2:
        if not run_lexical_analysis(args.infile):
            sys.exit(1)

    elif args.mode3:
        ast = build_ast(args.infile)
        if not ast or not write_parser_output(ast, args.infile):
            sys.exit(1)

    elif args.mode4:
        ast = build_ast(args.infile)
        if not ast or not run_type_checker(args.infile, ast):
            sys.exit(1)


if __name__ == "__main__":
    main()
