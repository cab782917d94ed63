"""Domain models: search request/response, fingerprint, and navigation states."""

from gsearch.models.fingerprint import FingerprintProfile, PersistedSessionState
from gsearch.models.search import SearchRequest, SearchResponse, SearchResult
from gsearch.models.states import AttemptContext, NavigationState, PageClassification

__all__ = [
    "AttemptContext",
    "FingerprintProfile",
    "NavigationState",
    "PageClassification",
    "PersistedSessionState",
    "SearchRequest",
    "SearchResponse",
    "SearchResult",
]
