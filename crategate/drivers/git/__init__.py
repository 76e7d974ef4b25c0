"""Working-tree status checker."""

from crategate.drivers.git.git_status import GitStatusChecker, parse_porcelain

__all__ = ["GitStatusChecker", "parse_porcelain"]
