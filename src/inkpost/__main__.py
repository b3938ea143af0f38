"""Allow ``python -m inkpost``."""

from inkpost.cli import main

main()
