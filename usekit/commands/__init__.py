"""Command modules for the usekit CLI."""
