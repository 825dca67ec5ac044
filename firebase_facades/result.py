"""Uniform result envelope returned by every facade operation."""

import functools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

import requests
from google.api_core import exceptions as google_exceptions

T = TypeVar('T')

NOT_FOUND = 'Document not found'


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a facade call: ``data`` when ``success``, ``error`` otherwise."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None

    def __post_init__(self):
        if self.success and self.error is not None:
            raise ValueError("A successful result cannot carry an error")
        if not self.success:
            if self.data is not None:
                raise ValueError("A failed result cannot carry data")
            if not self.error:
                raise ValueError("A failed result needs an error message")

    @classmethod
    def ok(cls, data: Optional[T] = None) -> 'Result[T]':
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> 'Result[T]':
        return cls(success=False, error=error)

    def __bool__(self):
        return self.success

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form, ``{'success': ..., 'data'|'error': ...}``."""
        if not self.success:
            return {'success': False, 'error': self.error}
        if self.data is None:
            return {'success': True}
        return {'success': True, 'data': self.data}


def message_of(exc: BaseException) -> str:
    """
    Extract a human-readable message from a failure.

    Identity Toolkit errors carry the service's code (EMAIL_EXISTS, WEAK_PASSWORD, ...)
    in the JSON body; that code is returned verbatim.
    """
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        error = body.get('error') if isinstance(body, dict) else None
        if isinstance(error, dict):
            error = error.get('message')
        if isinstance(error, str) and error:
            return error
    if isinstance(exc, google_exceptions.GoogleAPICallError) and exc.message:
        return exc.message
    return str(exc) or type(exc).__name__


def returns_result(action: str) -> Callable:
    """
    Wrap a facade method so it always returns a ``Result``.

    Plain return values become ``Result.ok``; any exception is logged through the
    facade's ``logger`` and becomes ``Result.fail``.
    """
    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            try:
                value = method(self, *args, **kwargs)
            except Exception as e:
                message = message_of(e)
                self.logger.log_failure(action, message)
                return Result.fail(message)
            result = value if isinstance(value, Result) else Result.ok(value)
            if result.success:
                self.logger.log_success(action, _summary(result.data))
            else:
                self.logger.log_failure(action, result.error)
            return result
        return wrapper
    return decorator


def _summary(data: Any) -> str:
    if isinstance(data, list):
        return f"{len(data)} record(s)"
    if isinstance(data, dict):
        return str(data.get('id') or data.get('uid') or '')
    return ""
