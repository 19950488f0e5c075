"""Stratum core library: overlay, document tree, functions, queries and expansion."""

from . import exceptions  # noqa: F401
