"""Cucumber report catalog.

Ingests Cucumber JSON result files, normalizes and repairs them, extracts
per-report metadata, and maintains the persisted index plus the soft/hard
deletion ledger for a directory of stored reports.
"""
