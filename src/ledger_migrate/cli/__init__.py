"""Command-line interface for ledger-migrate."""
