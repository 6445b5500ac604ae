"""Shared code for the restaurant admin Lambda functions (base layer)."""
