"""Domain layer — commands, history, entities, and keybinding rules.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
