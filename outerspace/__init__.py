"""Outerspace CLI -- scaffolding for the Outerspace fullstack starter kit."""

__version__ = "0.1.0"
