"""
Stratum - a templating system for directory trees

Stratum merges an ordered list of source directories into one document,
expands the template files in it, and writes the result to an output
directory.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
