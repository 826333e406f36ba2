# onkofhir/bundle.py
"""FHIR R4 transaction bundle assembly with upsert addressing.

Every entry is addressed as ``"<resourceType>/<id>"`` in both ``fullUrl``
and ``request.url`` and sent with ``PUT``, so replaying the same bundle
creates or replaces the same resources instead of duplicating them.

Like the rest of the package this builds plain dicts ready for
``json.dumps()``; no FHIR library is involved.

Key functions:
    - new_bundle: empty transaction bundle.
    - add_entry: append a resource as an upsert entry.
    - bundle_or_none: drop bundles with no entries.
    - resource_reference: reference dict for linking resources.
"""

from __future__ import annotations

from typing import Any, Optional

from .exceptions import BundleAssemblyError

UPSERT_METHOD = "PUT"


def new_bundle(bundle_type: str = "transaction") -> dict[str, Any]:
    """Return an empty FHIR R4 Bundle dict."""
    return {
        "resourceType": "Bundle",
        "type": bundle_type,
        "entry": [],
    }


def _address(resource: dict[str, Any]) -> str:
    resource_type = resource.get("resourceType")
    resource_id = resource.get("id")
    if not resource_type:
        raise BundleAssemblyError("Resource has no resourceType")
    if not resource_id:
        raise BundleAssemblyError(f"{resource_type} resource has no id")
    return f"{resource_type}/{resource_id}"


def resource_reference(resource: dict[str, Any]) -> dict[str, str]:
    """Return ``{"reference": "<resourceType>/<id>"}`` for *resource*."""
    return {"reference": _address(resource)}


def add_entry(bundle: dict[str, Any], resource: dict[str, Any]) -> dict[str, Any]:
    """Append *resource* to *bundle* as an idempotent upsert entry.

    Parameters
    ----------
    bundle:
        A Bundle dict, usually from :func:`new_bundle`.  Mutated in place.
    resource:
        A FHIR resource dict whose ``id`` is already assigned, typically
        from a pseudonymised digest.

    Returns
    -------
    dict
        The same *bundle*, for chaining.

    Raises
    ------
    BundleAssemblyError
        If the resource lacks ``resourceType`` or ``id``.
    """
    address = _address(resource)
    bundle.setdefault("entry", []).append({
        "fullUrl": address,
        "resource": resource,
        "request": {
            "method": UPSERT_METHOD,
            "url": address,
        },
    })
    return bundle


def bundle_or_none(bundle: dict[str, Any]) -> Optional[dict[str, Any]]:
    """Return *bundle*, or None when it has no entries."""
    if not bundle.get("entry"):
        return None
    return bundle
