"""SEHI Calc - S-Corp health insurance strategy comparison."""

__version__ = "0.3.0"
