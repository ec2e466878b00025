"""Agentic Bug Hunter: RDI bug analysis demo core."""

__version__ = "0.1.0"
