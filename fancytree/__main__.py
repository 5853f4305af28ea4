"""Module entrypoint for ``python -m fancytree``."""

from .cli import main


if __name__ == "__main__":
    main()
