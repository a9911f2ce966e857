"""Concept model generator - turns a source repository into a domain concept graph."""

__version__ = "0.1.0"
