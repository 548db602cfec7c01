"""xTools - cross-platform serial terminal core with CLI and web front-ends."""

__version__ = "0.1.0"
