"""crategate - pre-publish validation gate for cargo publish.

Inspects the local manifest, the git working tree and the crates.io
registry, reports what it found, and only runs ``cargo publish`` after the
operator explicitly confirms.
"""

# Version is defined in pyproject.toml and read dynamically
try:
    from importlib.metadata import version

    __version__ = version("crategate")
except Exception:
    __version__ = "0.0.0.dev0"  # Fallback for development installs

__all__ = ["__version__"]
