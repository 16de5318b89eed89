from __future__ import annotations

from typing import Any, Dict, List, Optional


class HealthLinkError(RuntimeError):
    """Base error; ``status_code`` is what the HTTP layer responds with."""

    status_code = 500

    def to_dict(self) -> Dict[str, Any]:
        return {'error': str(self)}


class ValidationError(HealthLinkError):
    status_code = 400

    def __init__(self, message: str = 'Invalid data', details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        return {'error': str(self), 'details': self.details}


class InvalidCoordinate(HealthLinkError):
    """Raised when a latitude/longitude is not a finite number in range."""

    status_code = 400


class NotFoundError(HealthLinkError):
    status_code = 404


class NoProviderAvailable(HealthLinkError):
    def __init__(self, message: str = 'NoProviderAvailable'):
        super().__init__(message)


class UpstreamProviderError(HealthLinkError):
    """Network or parse failure talking to an external AI or Maps service."""

    def __init__(self, message: str, *, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class ProviderConfigurationError(HealthLinkError):
    """A provider could not be registered; ``unavailable`` maps name -> reason."""

    def __init__(self, message: str, unavailable: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.unavailable = dict(unavailable or {})


class StorageError(HealthLinkError):
    pass
