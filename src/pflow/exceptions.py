#!/usr/bin/env python3
"""
pflow exceptions.

All pflow exceptions inherit from PflowError for easy catching. Every class
here is a fatal (programmer/declaration) error; firing rejections are never
raised, they come back as results with ``ok=False``.
"""


class PflowError(Exception):
    """Base exception for all pflow errors."""


class DeclarationError(PflowError, ValueError):
    """Error in a net declaration (labels, bounds, malformed data)."""


class InvalidArcError(DeclarationError):
    """A connector call targeted the wrong kind of node or a foreign node."""


class IndexingError(DeclarationError):
    """The indexer could not compile every arc of a declaration."""


class NotIndexedError(PflowError, RuntimeError):
    """A net was used for firing before a successful index."""


class UnknownSchemaError(PflowError, KeyError):
    """Dispatch named a schema with no registered net."""


class UnknownTransitionError(PflowError, KeyError):
    """An action named a transition the net does not declare."""


class InvalidMultiplierError(PflowError, ValueError):
    """A firing multiplier was not a positive integer."""
