"""Publishable identifier grammar and derivation.

Identifiers end up as element names in a generated capabilities document,
so they must satisfy the XML NCName production (a Name without colons).
See http://www.w3.org/TR/xml/#NT-Name
"""

import logging
import re
from typing import Optional

from .errors import InvalidIdentifierConfiguration

logger = logging.getLogger(__name__)

_NAME_START_CHARS = (
    r"A-Z_a-z"
    r"\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02FF"
    r"\u0370-\u037D\u037F-\u1FFF\u200C-\u200D"
    r"\u2070-\u218F\u2C00-\u2FEF\u3001-\uD7FF"
    r"\uF900-\uFDCF\uFDF0-\uFFFD\U00010000-\U000EFFFF"
)
_NAME_CHARS = _NAME_START_CHARS + r"\-.0-9\u00B7\u0300-\u036F\u203F-\u2040"

BARE_IDENTIFIER = re.compile("[" + _NAME_START_CHARS + "][" + _NAME_CHARS + "]*")

# Java-style nested class names use '$'
_QUALIFIER_SEPARATORS = re.compile(r"[.$]")


def is_valid_identifier(value: Optional[str]) -> bool:
    """Check a string against the bare identifier grammar."""
    if not isinstance(value, str) or not value:
        return False
    return BARE_IDENTIFIER.fullmatch(value) is not None


def short_type_name(type_name: Optional[str]) -> Optional[str]:
    """Strip qualification from an implementation type name.

    'org.geoserver.wfs.response.GML2OutputFormat' -> 'GML2OutputFormat'
    """
    if not type_name:
        return None
    return _QUALIFIER_SEPARATORS.split(type_name)[-1] or None


def derive_identifier(descriptor, diagnostics: Optional[logging.Logger] = None, strict: bool = False) -> str:
    """Derive the single publishable identifier for an encoder descriptor.

    Rules, in order:
        1. a grammar-valid identifier override
        2. the primary alias, if grammar-valid
        3. the short implementation type name

    Args:
        descriptor: Anything exposing ``identifier``, ``aliases`` and ``type_name``
        diagnostics: Logger that receives configuration warnings
        strict: Raise instead of warning when an override is invalid

    Raises:
        InvalidIdentifierConfiguration: If no rule yields a valid identifier,
            or if ``strict`` and the override is invalid.
    """
    log = diagnostics or logger
    override = descriptor.identifier

    if override is not None:
        if is_valid_identifier(override):
            return override
        if strict:
            raise InvalidIdentifierConfiguration(
                f"Identifier override {override!r} for {descriptor.type_name or descriptor.aliases[0]!r} "
                f"is not a valid element name"
            )
        log.warning(
            "Identifier override %r for %s is not a valid element name, falling back",
            override,
            descriptor.type_name or descriptor.aliases[0],
        )

    primary = descriptor.aliases[0]
    if is_valid_identifier(primary):
        return primary

    fallback = short_type_name(descriptor.type_name)
    if fallback is None:
        raise InvalidIdentifierConfiguration(
            f"Encoder with primary alias {primary!r} has no valid identifier: "
            f"the alias is not a valid element name and no implementation type name is set"
        )
    if not is_valid_identifier(fallback):
        raise InvalidIdentifierConfiguration(
            f"Encoder with primary alias {primary!r} has no valid identifier: "
            f"type name fallback {fallback!r} is not a valid element name"
        )
    return fallback
