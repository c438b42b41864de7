"""Engine Layer - Retrieval, Classification and Orchestration

This module provides the core matching engine, implementing:
- MatchingOrchestrator: Main entry point for per-item and batch matching
- CandidateRetriever: Search-mode dispatcher (trigram/bm25/hybrid/semantic)
- SupabaseSearchBackend / OpenAIEmbeddingProvider: External collaborators
- MatchResult: Standardized tiered result
- classify: Threshold-based tiering
"""

from .backends import SupabaseSearchBackend, to_candidates
from .classifier import AUTO_MATCH_THRESHOLD, PENDING_THRESHOLD, classify
from .embedding import OpenAIEmbeddingProvider
from .orchestrator import ItemMatchOutcome, MatchingOrchestrator
from .result import MatchResult, MatchStatus
from .retriever import CandidateRetriever
from .strategy import EmbeddingProvider, SearchBackend, SearchMode

__all__ = [
    "MatchingOrchestrator",
    "ItemMatchOutcome",
    "CandidateRetriever",
    "SupabaseSearchBackend",
    "OpenAIEmbeddingProvider",
    "to_candidates",
    "MatchResult",
    "MatchStatus",
    "classify",
    "AUTO_MATCH_THRESHOLD",
    "PENDING_THRESHOLD",
    "SearchMode",
    "SearchBackend",
    "EmbeddingProvider",
]
