"""Entry point: python -m axon <path-or-url-to-spec>

Compiles the spec and prints a Markdown catalog of the resulting tools.
"""

from __future__ import annotations

import logging
import sys

from .catalog import render_catalog
from .config import load_settings
from .errors import AxonError
from .router import parse_spec


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python -m axon <path-to-api-spec>", file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = load_settings()

    try:
        tools = parse_spec(args[0], timeout=settings.spec_timeout)
    except AxonError as e:
        logging.getLogger("axon").error("Unable to convert spec: %s", e)
        return 1

    print(render_catalog(tools.values(), title=args[0]), end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())
