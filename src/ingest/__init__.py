"""Package store ingestion.

This package walks the package store and extracts per-file metadata.
It prepares descriptors for merging into the archive index.
"""
