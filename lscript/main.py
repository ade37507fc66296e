"""Host driver for lscript: interprets a source file, an inline program, or runs in command-line mode. Also uses the
error handling context manager, so any error is reported as a single diagnostic line. Called from the lscript
console script.
"""

import argparse
import sys

from lscript.lang.config import Limits
from lscript.lang.error import ErrorHandler
from lscript.lang.session import Session
from lscript.lang.shell import Shell


def positive_int(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got '{text}'") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got '{text}'")
    return value


def build_parser():
    defaults = Limits()

    parser = argparse.ArgumentParser(prog="lscript", description="lscript interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-c", dest="command", metavar="SOURCE", help="program passed in as a string")
    parser.add_argument("--tree", action="store_true", help="print the parsed syntax tree before running")
    parser.add_argument("--no-color", action="store_true", help="do not color diagnostics")
    parser.add_argument("--max-iterations", type=positive_int, default=defaults.max_iterations,
                        help="iterations a single loop may run before it is reported as runaway")
    parser.add_argument("--max-vars", type=positive_int, default=defaults.max_vars,
                        help="number of distinct variables a program may create")
    parser.add_argument("--max-tokens", type=positive_int, default=defaults.max_tokens,
                        help="number of tokens a program may consist of")
    return parser


def main(argv=None):
    """Runs lscript interpreter. Called from lscript console script."""
    args = build_parser().parse_args(argv)
    limits = Limits(max_tokens=args.max_tokens, max_vars=args.max_vars, max_iterations=args.max_iterations)

    with ErrorHandler(color=not args.no_color) as error_handler:
        if args.command is not None:
            sess = Session(error_handler, Session.INLINE_FILE, cmd_line=False, source=args.command, limits=limits,
                           show_tree=args.tree)
            sess.run()

        elif args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, limits=limits, show_tree=args.tree)
            sess.run()

        else:
            sess = Session(error_handler, Session.SH_FILE, cmd_line=True, limits=limits, show_tree=args.tree)
            Shell(sess).cmdloop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
