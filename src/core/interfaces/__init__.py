"""Core interfaces/abstractions.

Contracts (Protocol) implemented by the concrete adapters, so the controller
depends on abstractions and tests can swap in fakes.
"""
