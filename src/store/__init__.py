"""Document storage layer.

This package persists documents as data files indexed by symlinked keys.
It powers get, save, and delete for the SDK and CLI.
"""
