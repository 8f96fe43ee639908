"""minish test suite."""
