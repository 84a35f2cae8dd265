"""Domain models and errors.

Pure data structures (Pydantic v2) and the exception hierarchy. The domain
knows nothing about subprocesses, Typer or Rich.
"""
