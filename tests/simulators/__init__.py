"""
Platform simulators for tests.
"""
from .thingsboard import ThingsBoardSimulator

__all__ = ["ThingsBoardSimulator"]
