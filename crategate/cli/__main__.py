#!/usr/bin/env python3
"""Entry point for crategate CLI when run as python -m crategate.cli."""

if __name__ == "__main__":
    from crategate.cli.main import main

    main()
