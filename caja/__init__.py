"""Caja back-office - registro de operaciones de cambio y saldos de caja/banco."""

__version__ = "0.1.0"
