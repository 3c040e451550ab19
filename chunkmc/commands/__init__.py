"""CLI subcommands for chunkmc."""
