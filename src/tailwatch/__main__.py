"""Entry point: ``python -m tailwatch [FILE ...]``."""

import sys

from tailwatch.cli import run_cli


def main() -> None:
    sys.exit(run_cli(sys.argv[1:]))


if __name__ == "__main__":
    main()
