"""Spectrum Scale (GPFS) companion tool: `mm* -Y` parsing and metrics."""

__version__ = '0.9.0'
