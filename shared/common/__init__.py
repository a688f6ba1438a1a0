# Shared Common Library for the marketplace services.
# Request tracing, actor headers, and the common error envelope.

__version__ = "1.0.0"

from .exceptions import (
    BaseAPIException,
    ForbiddenException,
    custom_exception_handler,
    error_envelope,
)

__all__ = [
    '__version__',
    'BaseAPIException',
    'ForbiddenException',
    'custom_exception_handler',
    'error_envelope',
]
