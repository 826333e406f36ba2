# onkofhir/reconcile.py
"""Prioritised latest reports: version reconciliation and priority ordering.

Raw notification list -> one record per report group -> ordered list.

Ordering note
-------------
The priority order is ranked *inverted*: the sort key of a record is the
position of its report reason code in the **reversed** priority order, with
``-1`` for codes that are not listed.  Sorting ascending therefore emits

    * unknown codes first,
    * then the **last** entry of ``priority_order``,
    * ...
    * the **first** entry of ``priority_order`` last.

Resource mappers treat the first emitted record as the canonical root and
link the rest to it through part-of references.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from .exceptions import ReconciliationError
from .models import NotificationBatch, NotificationRecord

logger = logging.getLogger(__name__)

_NOT_FOUND = -1

RecordLike = Union[NotificationRecord, Mapping[str, Any]]


def _as_record(item: RecordLike) -> NotificationRecord:
    if isinstance(item, NotificationRecord):
        return item
    if isinstance(item, Mapping):
        try:
            return NotificationRecord.from_payload(item)
        except ValidationError as exc:
            raise ReconciliationError(
                f"Notification record is missing its report group or version: {exc}"
            ) from exc
    raise ReconciliationError(
        f"Expected a notification record, got {type(item).__name__}"
    )


def reconcile_latest(
    records: Iterable[RecordLike],
    log: Optional[logging.Logger] = None,
) -> dict[int, NotificationRecord]:
    """Keep the highest version of each report group.

    A record replaces the current one only if its version number is
    strictly greater.  Two records sharing a version number within a group
    are ambiguous: the first one seen is kept and a warning is logged.

    Returns
    -------
    dict[int, NotificationRecord]
        Report group id -> latest record, in first-seen group order.
    """
    log = log or logger
    latest: dict[int, NotificationRecord] = {}
    for item in records:
        record = _as_record(item)
        current = latest.get(record.report_group_id)
        if current is None or record.version_number > current.version_number:
            latest[record.report_group_id] = record
        elif record.version_number == current.version_number:
            log.warning(
                "Report group %s has more than one record with version %s; keeping the first",
                record.report_group_id,
                record.version_number,
            )
    return latest


def order_by_priority(
    records: Iterable[NotificationRecord],
    priority_order: Sequence[str],
) -> list[NotificationRecord]:
    """Sort *records* by report reason code using the inverted ranking.

    *priority_order* is not modified; a reversed copy is ranked instead.
    The sort is stable for records with equal keys.
    """
    if priority_order is None:
        raise ReconciliationError("priority_order must be a sequence, got None")

    reversed_order = list(reversed(priority_order))

    def _rank(record: NotificationRecord) -> int:
        code = record.report_reason_code
        if code is None or code not in reversed_order:
            return _NOT_FOUND
        return reversed_order.index(code)

    return sorted(records, key=_rank)


def reconcile_and_order(
    batch: Union[NotificationBatch, Iterable[RecordLike]],
    priority_order: Sequence[str],
    log: Optional[logging.Logger] = None,
) -> list[NotificationRecord]:
    """Collapse *batch* to the latest version per report group and order it.

    Parameters
    ----------
    batch:
        A :class:`NotificationBatch`, or any iterable of records or raw
        changelog rows.
    priority_order:
        Report reason codes; the last entry is emitted first.  Must not be
        None, may be empty.
    log:
        Logger for ambiguity warnings.  Defaults to this module's logger.

    Returns
    -------
    list[NotificationRecord]
        One record per report group, ordered as described in the module
        docstring.  Empty for an empty batch.

    Raises
    ------
    ReconciliationError
        If *priority_order* is None or a record lacks its grouping fields.
    """
    if priority_order is None:
        raise ReconciliationError("priority_order must be a sequence, got None")
    if batch is None:
        raise ReconciliationError("batch must be an iterable of records, got None")
    latest = reconcile_latest(batch, log=log)
    return order_by_priority(latest.values(), priority_order)


def tumor_case_id(record: NotificationRecord) -> Optional[str]:
    """Return the tumor case id the record is assigned to."""
    return record.tumor_case_id
