"""Service layer — the undo/redo coordinator and the producer services.

Services may import from domain, infrastructure, and plugins.
They must never import from commands or output.
"""
