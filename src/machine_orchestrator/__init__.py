"""
machine_orchestrator

Top-level package for the machine allocation and lifecycle service.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
