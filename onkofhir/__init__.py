"""
ONKOFHIR Package - Reconciliation core for oncology notification records

Collapses versioned oncology case reports to their latest revision, orders
them by report reason, pseudonymises identifiers and assembles the mapped
resources into replay-safe FHIR transaction bundles.

Main Components:
    - onkofhir.identifiers: identifier normalisation and pseudonymisation
    - onkofhir.reconcile: latest-version reconciliation and priority ordering
    - onkofhir.bundle: upsert-addressed bundle assembly
    - onkofhir.processor: base class for resource-specific mappers
"""

from .bundle import add_entry, bundle_or_none, new_bundle, resource_reference
from .config import OnkoConfig, get_config
from .exceptions import BundleAssemblyError, OnkoFhirError, ReconciliationError
from .identifiers import IdentifierKind, Pseudonymizer, normalize_identifier, pseudonymize
from .models import (
    NotificationBatch,
    NotificationContent,
    NotificationRecord,
    NotificationReport,
)
from .processor import OnkoProcessor
from .reconcile import (
    order_by_priority,
    reconcile_and_order,
    reconcile_latest,
    tumor_case_id,
)

__version__ = "0.3.0"

__all__ = [
    "add_entry",
    "bundle_or_none",
    "new_bundle",
    "resource_reference",
    "OnkoConfig",
    "get_config",
    "BundleAssemblyError",
    "OnkoFhirError",
    "ReconciliationError",
    "IdentifierKind",
    "Pseudonymizer",
    "normalize_identifier",
    "pseudonymize",
    "NotificationBatch",
    "NotificationContent",
    "NotificationRecord",
    "NotificationReport",
    "OnkoProcessor",
    "order_by_priority",
    "reconcile_and_order",
    "reconcile_latest",
    "tumor_case_id",
]
