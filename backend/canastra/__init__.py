"""Canastra dupla tournament tracker."""

__version__ = "0.1.0"
