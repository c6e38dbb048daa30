from .base_error_handler import BaseErrorHandler
from .error_handler_factory import ErrorHandlerFactory

__all__ = ['BaseErrorHandler', 'ErrorHandlerFactory']
