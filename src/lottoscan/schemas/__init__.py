"""Typed records produced and consumed by the engine."""
