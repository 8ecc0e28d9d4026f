"""Shared configuration, logging, error types and small helpers."""
