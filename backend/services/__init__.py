"""Rule engine, coverage analysis, rule storage and chat orchestration."""
