"""SQLite storage layer for a blockchain indexer, with a reader for old TOML configuration."""

__version__ = "0.1.0"