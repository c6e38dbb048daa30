"""Evaluation harness for binary classifiers trained on imbalanced data."""

__version__ = "0.1.0"
