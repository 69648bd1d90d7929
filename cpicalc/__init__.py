"""Cumulative CPI rate calculator for the UK, the euro area and the US."""

__version__ = "0.1.0"
