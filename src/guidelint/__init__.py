"""guidelint - pattern-level SQL and Elm style-guide linter."""

__version__ = "0.4.0"
