"""Allow ``python -m cypress_parallel``."""

from cypress_parallel.cli import main

main()
