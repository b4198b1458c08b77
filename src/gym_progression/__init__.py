"""Adaptive progressive-overload recommendations for resistance training."""

__version__ = "0.1.0"
