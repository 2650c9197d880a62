"""Framework-specific wiring for the error-reporting middleware."""
