"""
CLI Interface - Command-line tools for LegalSearch.

Provides commands for:
- Semantic and hybrid search
- Search analytics reports
- Telemetry inspection
- System management
"""

from .main import app, main

__all__ = ["app", "main"]
