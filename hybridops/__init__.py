"""Hybrid-Ops mind: heuristic compilation, axiom validation and workflow gates."""

__version__ = "0.1.0"
