"""Layer analysis and optimization."""
