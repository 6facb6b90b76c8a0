"""Daylist: daily playlist selection and sequencing."""

__version__ = "0.3.0"
