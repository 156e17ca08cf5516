"""Fluent SQL query building, pagination and transactions for MySQL."""

__version__ = "0.1.0"