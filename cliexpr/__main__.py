"""
Command-line front end: python -m cliexpr "{{$ --driver:ChromeDriver --tag:a --tag:b }}"

Reads the expression from the arguments (joined with spaces) or from stdin,
prints the parsed arguments as a rich table (or JSON with --json), and renders
collected faults on stderr. --check only validates the template markers.
"""
import argparse
import json
import logging
import sys

from rich.box import ROUNDED
from rich.console import Console
from rich.table import Table
from rich.text import Text

from . import __version__
from .faults import trigger
from .parser import ExpressionParser
from .utils import pluralize

__prog__ = "cliexpr"


def _arguments(argv):
    parser = argparse.ArgumentParser(
        prog=__prog__,
        description="parse a templated command-line expression into a flat argument mapping",
    )
    parser.add_argument("expression", nargs="*", help="the expression; read from stdin when omitted")
    parser.add_argument("--json", action="store_true", help="print the mapping as a JSON object")
    parser.add_argument("--check", action="store_true", help="only tell whether the expression holds a template")
    parser.add_argument("--plain", action="store_true", help="disable colors and panels")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every pipeline stage on stderr")
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    return parser.parse_args(argv)


def _table(arguments, colorful):
    table = Table(
        title=pluralize(len(arguments), "argument"),
        box=ROUNDED,
        show_lines=False,
        header_style="bold #00E5FF" if colorful else "",
    )
    table.add_column("Argument", style="bold #E6E6F0" if colorful else "", no_wrap=True)
    table.add_column("Value", style="#C8C8D0" if colorful else "", overflow="fold")
    for key, value in arguments.items():
        # Text keeps nested "{{$ ... }}" literal (no console markup)
        table.add_row(Text(key), Text(value))
    return table


def main(argv=None, /, *, parser=None, stdin=None, console=None):
    """
    run the front end; returns the process exit status.

    exit status
    - 0: the expression holds a template (arguments may still be empty).
    - 1: no template was found.
    """
    options = _arguments(argv)
    parser = parser or ExpressionParser()
    colorful = not options.plain
    console = console or Console(no_color=not colorful, highlight=False)

    if options.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if options.expression:
        text = " ".join(options.expression)
    else:
        text = (stdin or sys.stdin).read()

    if options.check:
        well_formed = parser.is_well_formed(text)
        console.print("well-formed" if well_formed else "malformed")
        return 0 if well_formed else 1

    outcome = parser.analyze(text)

    for fault in outcome.faults:
        trigger(fault, shell=True, deferred=True, colorful=colorful, fancy=colorful, prog=__prog__)

    if options.json:
        console.print_json(json.dumps(dict(outcome.arguments), ensure_ascii=False))
    else:
        console.print(_table(outcome.arguments, colorful))

    return 0 if parser.is_well_formed(text) else 1


if __name__ == "__main__":
    sys.exit(main())
