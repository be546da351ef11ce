"""
ambient-db Test Suite.

This package contains:
- unit/: Unit tests (models, ids, content tags, registry, CLI, config)
- integration/: Document store adapters end to end (in-memory, fake Firestore client)
"""
