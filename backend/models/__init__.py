"""Pydantic models for rules, routing decisions, coverage reports and the API."""
