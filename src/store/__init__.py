"""Archive index storage and versioning layer.

This package owns the in-memory archive index, its snapshot timeline,
and the authoritative publish/purge mutations applied to it.
"""
