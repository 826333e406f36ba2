# onkofhir/identifiers.py
"""Identifier normalisation and pseudonymisation.

Two pure helpers used by every resource mapper:

    - **normalize_identifier** -- pulls the canonical 9-character
      identifier out of a noisy legacy string.
    - **Pseudonymizer** -- salted SHA-256 hashing of identifiers, with the
      salt chosen by :class:`IdentifierKind`.

Key components:
    - IDENTIFIER_PATTERN: the compiled ``[^0][0-9]{8}`` pattern.
    - IdentifierKind: closed enumeration of hashable identifier types.
    - Pseudonymizer: kind -> salt table resolved once from configuration.
    - pseudonymize(kind, value): functional shortcut.
"""

from __future__ import annotations

import hashlib
import logging
import re
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union

from .config import OnkoConfig, get_config

logger = logging.getLogger(__name__)

# Any character except the literal "0", followed by exactly eight ASCII digits.
IDENTIFIER_PATTERN: re.Pattern[str] = re.compile(r"[^0][0-9]{8}")

_SEPARATOR = "|"


def normalize_identifier(raw: str, log: Optional[logging.Logger] = None) -> str:
    """Return the first 9-character identifier found in *raw*.

    The leading character only has to differ from ``"0"``; it need not be a
    digit.  Later matches are ignored.

    Parameters
    ----------
    raw:
        Arbitrary string, e.g. a legacy patient number with prefixes or
        zero padding.
    log:
        Logger that receives the warning on a miss.  Defaults to this
        module's logger.

    Returns
    -------
    str
        The matched identifier, or ``""`` when nothing matches.  An empty
        result is a data-quality miss, not an error.
    """
    match = IDENTIFIER_PATTERN.search(raw)
    if match is None:
        (log or logger).warning(
            "Identifier to convert does not have 9 digits without leading '0': %s", raw
        )
        return ""
    return match.group()


class IdentifierKind(str, Enum):
    """Identifier types that select the pseudonymisation salt."""

    PATIENT_ID = "Patient"
    CONDITION_ID = "Condition"
    OBSERVATION_ID = "Observation"
    SURROGATE_ID = "Surrogate"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, tag: Union[IdentifierKind, str, None]) -> IdentifierKind:
        """Map a type tag to a kind; anything unrecognised is UNKNOWN."""
        if isinstance(tag, cls):
            return tag
        try:
            return cls(tag)
        except ValueError:
            return cls.UNKNOWN


def _sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class Pseudonymizer:
    """Salted one-way hashing of identifiers.

    The salt for each kind is the matching identifier system from
    :class:`~onkofhir.config.OnkoConfig`.  Surrogate identifiers are hashed
    without a salt; UNKNOWN is not hashed at all.
    """

    def __init__(self, config: OnkoConfig) -> None:
        self._salts: Mapping[IdentifierKind, str] = MappingProxyType({
            IdentifierKind.PATIENT_ID: config.patient_id_system,
            IdentifierKind.CONDITION_ID: config.condition_id_system,
            IdentifierKind.OBSERVATION_ID: config.observation_id_system,
        })

    def hash(self, kind: Union[IdentifierKind, str], value: str) -> Optional[str]:
        """Return the 64-character lowercase hex digest, or None for UNKNOWN."""
        kind = IdentifierKind.parse(kind)
        if kind is IdentifierKind.SURROGATE_ID:
            return _sha256_hex(value)
        salt = self._salts.get(kind)
        if salt is None:
            return None
        return _sha256_hex(f"{salt}{_SEPARATOR}{value}")


def pseudonymize(
    kind: Union[IdentifierKind, str],
    value: str,
    config: Optional[OnkoConfig] = None,
) -> Optional[str]:
    """Hash *value* for *kind*; see :meth:`Pseudonymizer.hash`.

    Uses the process-wide :func:`~onkofhir.config.get_config` settings when
    *config* is omitted.
    """
    return Pseudonymizer(config if config is not None else get_config()).hash(kind, value)
