"""
legalsearch - Hybrid semantic and keyword retrieval over legal documents.

Example:
    >>> from legalsearch.domains.search import HybridSearchQuery
    >>> from legalsearch.interfaces.deps import get_hybrid_search
    >>> response = await get_hybrid_search().search(HybridSearchQuery(query="despido"))
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
