# onkofhir/processor.py
"""Base class for resource-specific notification mappers.

A mapper (medication statement, condition, observation, ...) subclasses
:class:`OnkoProcessor` and uses its helpers to reconcile the incoming batch,
derive stable ids and assemble the output bundle.  The processor holds only
the configuration and logger it was constructed with.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence, Union

from .bundle import add_entry
from .config import OnkoConfig
from .identifiers import IdentifierKind, Pseudonymizer, normalize_identifier
from .models import NotificationBatch, NotificationRecord
from .reconcile import RecordLike, reconcile_and_order, tumor_case_id


class OnkoProcessor:
    """Shared reconciliation and assembly helpers for resource mappers."""

    def __init__(
        self,
        config: OnkoConfig,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self._pseudonymizer = Pseudonymizer(config)

    def get_hash(self, kind: Union[IdentifierKind, str], value: str) -> Optional[str]:
        return self._pseudonymizer.hash(kind, value)

    def convert_id(self, raw: str) -> str:
        return normalize_identifier(raw, log=self.logger)

    def prioritise_latest(
        self,
        batch: Union[NotificationBatch, Iterable[RecordLike]],
        priority_order: Sequence[str],
    ) -> list[NotificationRecord]:
        return reconcile_and_order(batch, priority_order, log=self.logger)

    def get_tumor_id(self, record: NotificationRecord) -> Optional[str]:
        return tumor_case_id(record)

    def add_resource_as_entry(
        self,
        bundle: dict[str, Any],
        resource: dict[str, Any],
    ) -> dict[str, Any]:
        return add_entry(bundle, resource)
