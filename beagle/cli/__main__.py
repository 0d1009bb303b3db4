"""Allow ``python -m beagle.cli`` to behave like the ``beagle-cli`` script."""

from beagle.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
