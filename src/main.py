"""Run script.

Lets the CLI run with `python -m main` during development, next to the
`vipvpn` console script.
"""

from __future__ import annotations

from cli.main import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
