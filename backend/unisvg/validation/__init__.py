"""Document validation, auto-fix and correction feedback."""
