"""Configuration, constants, logging and scan context."""
