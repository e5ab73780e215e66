"""Kubernetes cost attribution and optimization recommendation engine."""

__version__ = "0.1.0"
