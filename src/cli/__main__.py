"""Allow `python -m cli ...` from an installed or `src`-on-path checkout."""

from cli.main import run

run()
