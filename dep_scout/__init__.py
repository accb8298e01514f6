# dep_scout/__init__.py
"""
DepScout package initializer.
Defines the package version; the command line lives in :mod:`dep_scout.cli`.
"""
__version__ = "0.1.0"
