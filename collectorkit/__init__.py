"""Derive receiver service ports, liveness probes and annotations from collector configurations."""

__version__ = "0.1.0"
__all__ = ["annotations", "config", "protocols", "receiver"]