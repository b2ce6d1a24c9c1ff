"""Entrypoint for `python -m menuworks`."""

from .cli import main


if __name__ == "__main__":
    main()
