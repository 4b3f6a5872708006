# threepwood/__init__.py
"""
Threepwood package initializer.
Defines package version; the CLI lives in :mod:`threepwood.cli`.
"""
__version__ = "0.1.0"
