"""slidestate — persisted application state and its schema migrations."""

__version__ = "3.1.0"
