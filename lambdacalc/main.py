"""Uses the keyword table and pure lambda calculus reduction to run calculator scripts or the command-line shell. Also
uses error handling context manager. Called from the lcalc executable script.

Python version must be >=3.8, because error handling and the keyword table require that dicts are insertion-ordered.
"""

import argparse
import sys

from lambdacalc.lang.error import ErrorHandler
from lambdacalc.lang.session import Session
from lambdacalc.lang.shell import Shell
from lambdacalc.pure.lexical import NormalOrderReducer


def main(argv=None):
    """Runs the lambda calculator. Called from lcalc executable script."""
    assert sys.version_info >= (3, 8), "lcalc cannot be run with python < 3.8"

    parser = argparse.ArgumentParser(prog="lcalc", description="Lambda calculus calculator with keyword shorthands.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-v", "--verbose", action="store_true", help="print every reduction step")
    parser.add_argument("-n", "--numbers", action="store_true", help="print Church numerals as numbers")
    parser.add_argument("--max-steps", type=int, default=NormalOrderReducer.MAX_STEPS,
                        help="reduction steps allowed per expression (default: %(default)s)")
    parser.add_argument("--no-bootstrap", action="store_true", help="start without the default keywords")
    args = parser.parse_args(argv)

    with ErrorHandler(verbose=args.verbose) as error_handler:
        options = dict(bootstrap=not args.no_bootstrap, numbers=args.numbers, max_steps=args.max_steps)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, **options)
            sess.run()

            for result in sess.results:
                print(result)

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, **options)).cmdloop()


if __name__ == "__main__":
    main()
