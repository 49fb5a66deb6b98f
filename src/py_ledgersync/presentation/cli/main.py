from __future__ import annotations

import sys

from typer import Typer

from py_ledgersync import __version__
from py_ledgersync.infrastructure.logging.config import configure_logging
from py_ledgersync.sdk.errors import UnexpectedError, map_exception

from .entries import entry
from .reports import report
from .sequences import seq

_app_help = (
    "Ledger consistency tools: period reports over rows files, entry validation, "
    "counter-account suggestions and persistent document numbering."
)

app: Typer = Typer(help=_app_help, add_completion=False, pretty_exceptions_enable=False)
app.add_typer(report, name="report")
app.add_typer(entry, name="entry")
app.add_typer(seq, name="seq")


@app.command("version")
def version_cmd() -> None:
    """Print package version."""
    print(__version__)


def cli(argv: list[str] | None = None) -> int:
    """Run Typer application with top-level error handling.

    Errors are mapped to the public SDK types: input, domain and not-found
    errors exit with 2, anything else with 1, always as ``[ERROR] <msg>`` on
    stderr. SystemExit passes through as its code. Logging is routed to
    stderr so report output on stdout stays machine readable.
    """
    configure_logging(sys.stderr)
    args = argv if argv is not None else sys.argv[1:]
    try:
        app(args=args, prog_name="ledgersync")
        return 0
    except SystemExit as se:
        return int(se.code) if isinstance(se.code, int) else 0
    except Exception as exc:
        public = map_exception(exc)
        prefix = "unexpected: " if isinstance(public, UnexpectedError) else ""
        print(f"[ERROR] {prefix}{public}", file=sys.stderr)
        return public.exit_code


def run() -> None:
    sys.exit(cli())


if __name__ == "__main__":  # pragma: no cover
    run()
