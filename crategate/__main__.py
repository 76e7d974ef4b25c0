"""Entry point for running crategate as a module (python -m crategate)."""

from __future__ import annotations


def main() -> None:
    """Main entry point for module execution."""
    from crategate.cli.main import main as cli_main

    cli_main()


if __name__ == "__main__":
    main()
