"""Domain models and enums.

Plain, strictly validated data structures (Pydantic v2). The domain knows
nothing about pandas I/O, the CLI or the filesystem layout.
"""
