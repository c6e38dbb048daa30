from .base_app_logger import BaseAppLogger
from .app_logger import AppLogger

__all__ = ['BaseAppLogger', 'AppLogger']
