"""
Module entry-point that makes the package runnable with

    python -m scpomatic

The behaviour is identical to the *scpomatic-cli* console script.
"""

from scpomatic.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
