"""CLI subcommands of pacpin."""
