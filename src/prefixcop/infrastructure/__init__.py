"""Infrastructure layer — source scanning and the implements graph.

This layer depends on stdlib and third-party libs (NetworkX).
It reads descriptor types from the domain layer but never imports from
services, commands, or output.
"""
