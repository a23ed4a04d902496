"""Utilidades del backend"""
from .error_utils import (
    APIError,
    NotFoundError,
    ErrorCodes,
    error_response,
    success_response,
    handle_errors,
    log_request,
    log_operation,
    json_body,
    validate_required
)

__all__ = [
    'APIError',
    'NotFoundError',
    'ErrorCodes',
    'error_response',
    'success_response',
    'handle_errors',
    'log_request',
    'log_operation',
    'json_body',
    'validate_required'
]
