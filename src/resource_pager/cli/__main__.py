"""Module entrypoint to support ``python -m resource_pager.cli`` invocation."""

from __future__ import annotations

from resource_pager.cli.app import run


def main() -> None:
    """Execute the Typer application."""

    run()


if __name__ == "__main__":
    main()
