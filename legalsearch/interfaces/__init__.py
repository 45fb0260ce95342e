"""
Interfaces - User-facing applications.

- cli: Command-line interface
- deps: Service wiring shared by interfaces
"""

__all__ = ["cli", "deps"]
