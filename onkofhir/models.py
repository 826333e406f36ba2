"""Data models for versioned oncology notification records.

A :class:`NotificationRecord` is one row of the source changelog: a report
revision identified by its report group (``LKR_MELDUNG``) and version
(``VERSIONSNUMMER``), carrying the already-parsed report payload
(``XML_DATEN``).  Parsing the XML itself happens upstream.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationReport(BaseModel):
    """The single report carried inside a notification payload.

    Extra keys are kept so resource-specific mappers can read their own
    fields from the same object.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    report_id: Optional[str] = Field(default=None, alias="Meldung_ID")
    report_reason_code: Optional[str] = Field(default=None, alias="Meldeanlass")
    tumor_case_id: Optional[str] = Field(default=None, alias="Tumor_ID")


class NotificationContent(BaseModel):
    """Parsed notification payload."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    patient_id: Optional[str] = Field(default=None, alias="Patient_ID")
    report: Optional[NotificationReport] = Field(default=None, alias="Meldung")


class NotificationRecord(BaseModel):
    """One versioned report submission."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    record_id: Optional[int] = Field(default=None, alias="ID")
    reference_number: Optional[str] = Field(default=None, alias="REFERENZ_NUMMER")
    report_group_id: int = Field(alias="LKR_MELDUNG")
    version_number: int = Field(alias="VERSIONSNUMMER")
    content: Optional[NotificationContent] = Field(default=None, alias="XML_DATEN")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> NotificationRecord:
        """Build a record from a changelog row keyed by its column names.

        Raises
        ------
        pydantic.ValidationError
            If ``LKR_MELDUNG`` or ``VERSIONSNUMMER`` is missing or not an
            integer.
        """
        return cls.model_validate(dict(payload))

    @property
    def report_reason_code(self) -> Optional[str]:
        if self.content is None or self.content.report is None:
            return None
        return self.content.report.report_reason_code

    @property
    def tumor_case_id(self) -> Optional[str]:
        if self.content is None or self.content.report is None:
            return None
        return self.content.report.tumor_case_id


@dataclass
class NotificationBatch:
    """Unordered collection of notification records, usually one case."""

    elements: list[NotificationRecord] = field(default_factory=list)

    def add_element(self, record: NotificationRecord) -> None:
        self.elements.append(record)

    def __iter__(self) -> Iterator[NotificationRecord]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)
