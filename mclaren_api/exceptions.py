"""
Error types raised by the McLaren API.

The data-access, service and routing layers only raise subclasses of
McLarenAPIError. Each subclass carries the HTTP status it maps to and the
``details`` payload that is safe to return to a caller; the error handlers in
``error_handlers`` turn them into the standard error body.
"""

from typing import Any, Dict, List, Optional

Context = Optional[Dict[str, Any]]


def _merge(context: Context, **values: Any) -> Dict[str, Any]:
    """Copy of ``context`` with every non-empty value added."""
    merged = dict(context or {})
    merged.update({key: value for key, value in values.items() if value is not None})
    return merged


class McLarenAPIError(RuntimeError):
    """
    Root of the API error hierarchy.

    ``context`` is for logs only. ``details`` is what reaches the response body.
    """

    status_code: int = 500

    def __init__(self, message: str, context: Context = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def __str__(self) -> str:
        if not self.context:
            return self.message
        pairs = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} (context: {pairs})"

    @property
    def details(self) -> Any:
        return None

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None


class NotFoundError(McLarenAPIError):
    """No entity of kind ``entity`` has id ``entity_id``."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Any, context: Context = None) -> None:
        super().__init__(
            f"{entity} with id {entity_id} was not found",
            _merge(context, entity=entity, entity_id=entity_id),
        )
        self.entity = entity
        self.entity_id = entity_id

    @property
    def details(self) -> Any:
        return {"entity": self.entity, "id": self.entity_id}


class ValidationError(McLarenAPIError):
    """
    An entity broke a required-field, uniqueness or reference rule.

    ``field_errors`` holds ``{"field": ..., "message": ...}`` entries and is
    returned to the caller as-is.
    """

    status_code = 400

    def __init__(
        self,
        message: str,
        field_errors: Optional[List[Dict[str, str]]] = None,
        context: Context = None,
    ) -> None:
        self.field_errors = list(field_errors or [])
        fields = [error["field"] for error in self.field_errors] or None
        super().__init__(message, _merge(context, fields=fields))

    @property
    def details(self) -> Any:
        return self.field_errors


class RoutingError(McLarenAPIError):
    """The path names an unsupported API version or an unmapped resource."""

    status_code = 404

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        version: Optional[str] = None,
        context: Context = None,
    ) -> None:
        super().__init__(message, _merge(context, path=path or None, version=version or None))
        self.path = path
        self.version = version

    @property
    def details(self) -> Any:
        return {"path": self.path, "version": self.version}


class MethodNotAllowedError(RoutingError):
    """The path names a mounted resource that does not accept the request method."""

    status_code = 405

    def __init__(
        self,
        method: str,
        path: str,
        allowed: List[str],
        version: Optional[str] = None,
        context: Context = None,
    ) -> None:
        super().__init__(
            f"Method {method} is not allowed on {path}",
            path=path,
            version=version,
            context=_merge(context, method=method),
        )
        self.method = method
        self.allowed = sorted(allowed)

    @property
    def details(self) -> Any:
        return {"path": self.path, "method": self.method, "allowed": self.allowed}

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"Allow": ", ".join(self.allowed)}


class AuthorizationError(McLarenAPIError):
    """The authorization policy refused the request."""

    status_code = 403


class NotAcceptableError(McLarenAPIError):
    """The Accept header excludes ``application/json``."""

    status_code = 406

    def __init__(self, accept: str, context: Context = None) -> None:
        super().__init__(
            f"Cannot produce a response matching Accept: {accept}",
            _merge(context, accept=accept),
        )
        self.accept = accept

    @property
    def details(self) -> Any:
        return {"accept": self.accept, "available": ["application/json"]}


class StorageError(McLarenAPIError):
    """
    Unexpected backend failure.

    The driver exception is chained as ``__cause__`` for the logs and never
    sent to the caller.
    """

    status_code = 500


class ConfigurationError(McLarenAPIError):
    """A setting is missing or has a value the API cannot use."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Context = None,
    ) -> None:
        super().__init__(
            message, _merge(context, config_key=config_key or None, config_value=config_value)
        )
        self.config_key = config_key
        self.config_value = config_value


class InitializationError(McLarenAPIError):
    """The database could not be created, migrated or seeded at startup."""

    def __init__(
        self, message: str, provider: Optional[str] = None, context: Context = None
    ) -> None:
        super().__init__(message, _merge(context, provider=provider or None))
        self.provider = provider
