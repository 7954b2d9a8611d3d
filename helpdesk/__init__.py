"""Helpdesk chat widget backend: markup rendering, reveal, escalation and tickets."""

from .__version__ import __version__

__all__ = ["__version__"]
