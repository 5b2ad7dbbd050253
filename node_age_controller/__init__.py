"""Kubernetes controller that cordons nodes once they exceed a maximum age."""

__version__ = "0.1.0"
