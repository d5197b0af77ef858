"""
Exceptions for satx.

The engine itself never raises: these cover the operator inputs
(catalog files, imported model documents) that the CLI validates.
"""


class SatxError(Exception):
    """Base exception for satx."""
    pass


class CatalogError(SatxError):
    """Raised when a catalog file cannot be read or has the wrong shape."""
    pass


class ModelImportError(SatxError):
    """Raised when an imported learner model document is invalid."""
    pass
