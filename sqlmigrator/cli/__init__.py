"""Command line interface for the migrator."""
