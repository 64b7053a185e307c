"""GTK application entry point."""

from __future__ import annotations

import logging
import sys
from typing import Sequence


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    debug = "-d" in args or "--debug" in args
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(module)s: %(message)s",
    )
    from orchestrator import Orchestrator

    return Orchestrator().run(args)


if __name__ == "__main__":
    raise SystemExit(main())
