"""Drivers for the external collaborators: manifest, git, registry and cargo."""
