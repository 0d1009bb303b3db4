"""Shared helpers: errors, logging, job status and the per-subject run log."""
