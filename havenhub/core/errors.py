"""Exceptions raised below the route layer.

Routes translate these into HTTPException codes; anything that slips through
is caught by the application-level handlers registered in havenhub.main.
"""

from typing import Optional


class UpstreamError(Exception):
    """An external service (document store, identity, model) failed."""

    def __init__(self, service: str, status_code: Optional[int], message: str):
        super().__init__(f"{service} upstream error status={status_code}: {message}")
        self.service = service
        self.status_code = status_code
        self.message = message


class DocumentNotFound(UpstreamError):
    """The document store answered 404 for a document or collection."""

    def __init__(self, path: str):
        super().__init__("firestore", 404, f"not found: {path}")
        self.path = path


class IdentityError(UpstreamError):
    """Identity REST call rejected; `code` carries the provider's error code (e.g. INVALID_PASSWORD)."""

    def __init__(self, status_code: Optional[int], code: str):
        super().__init__("identity", status_code, code)
        self.code = code


class InsightsNotConfigured(RuntimeError):
    pass


class InsightRateLimited(Exception):
    def __init__(self, retry_delay: Optional[str] = None):
        super().__init__("generative model rate limited")
        self.retry_delay = retry_delay


class InvalidDocumentPath(ValueError):
    """A client-supplied id cannot be used as a document path segment."""

    def __init__(self, segment: str):
        super().__init__(f"invalid document path segment: {segment!r}")
        self.segment = segment
