"""
Module entry-point that makes the package runnable with

    python -m beagle

The behaviour is identical to the *beagle-cli* console script.
"""

from beagle.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
