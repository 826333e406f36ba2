"""Exceptions raised by the reconciliation core.

Data-quality misses (an identifier that cannot be normalised, an identifier
kind that is not pseudonymised) are not errors and never raise.
"""


class OnkoFhirError(Exception):
    """Base class for all onkofhir errors."""


class ReconciliationError(OnkoFhirError, ValueError):
    """Raised when a batch or priority order violates the reconciliation contract.

    Aborts only the reconciliation call that raised it.
    """


class BundleAssemblyError(OnkoFhirError, ValueError):
    """Raised when a resource cannot be addressed inside an output bundle."""
