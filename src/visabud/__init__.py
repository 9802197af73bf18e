"""VisaBud: an offline visa and immigration assistant engine."""

__version__ = "0.1.0"
