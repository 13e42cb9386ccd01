"""Runtime and run-file configuration."""
