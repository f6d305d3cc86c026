"""External services integrated with the mock SIMS."""
