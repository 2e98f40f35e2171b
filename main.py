from __future__ import annotations

import logging
import sys
import traceback

from photostamp.cli import main as cli_main

_log = logging.getLogger("photostamp.main")


def _install_exception_logging() -> None:
    """Frozen builds have no console; route uncaught exceptions to the log."""

    def _log_uncaught_exception(exc_type, exc_value, exc_tb) -> None:
        message = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
        _log.error("uncaught exception\n%s", message.rstrip())
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _log_uncaught_exception


def main() -> None:
    _install_exception_logging()
    _log.debug("startup argv=%s", sys.argv[1:])
    cli_main()


if __name__ == "__main__":
    main()
