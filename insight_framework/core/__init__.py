"""Core configuration, constants, exceptions and logging for the insight framework."""
