"""rollsheet: character sheet attributes, roll templates and a dice formula engine."""

__version__ = "0.1.0"
