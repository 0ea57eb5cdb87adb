"""Entry point for `python -m themeselector`."""

import sys


def main():
    from themeselector.app import run_app
    sys.exit(run_app())


if __name__ == "__main__":
    main()
