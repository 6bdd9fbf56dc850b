"""Instrumented vector store abstraction with backend-agnostic telemetry."""

__version__ = "0.1.0"
