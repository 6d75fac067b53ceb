"""Command line interface for swishfit."""
