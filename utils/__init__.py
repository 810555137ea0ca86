# utils package initialization

from .error_handler import handle_error, ErrorKind, SanitizedError

__all__ = ['handle_error', 'ErrorKind', 'SanitizedError']
