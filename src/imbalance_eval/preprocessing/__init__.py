"""
Preprocessing Package

Centering/scaling fitted on the training partition and applied to all partitions.
"""

from .base_preprocessor import BasePreprocessor
from .preprocessor import Preprocessor

__all__ = [
    'BasePreprocessor',
    'Preprocessor'
]
