"""CLI subcommands for depprune (``analyze`` and ``prune``)."""
