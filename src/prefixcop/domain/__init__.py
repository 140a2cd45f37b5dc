"""Domain layer — type descriptors, constraints, and naming rules.

This layer depends only on the stdlib.
It must never import from services, infrastructure, commands, or config.
"""
