"""Core wiring: configuration, logging, errors and extensions."""
