"""Allow ``python -m flexref``."""

from flexref.cli import main

main()
