"""Result-format section of a capabilities (discovery) document.

Builds the list of publishable identifiers and renders it for the
document generator: as XML element tokens in the WFS 1.0 style
(``<ResultFormat><GML2/><SHAPE-ZIP/></ResultFormat>``), or as a
manifest map in JSON or CBOR.
"""

import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Dict, List

import cbor2

from .errors import ManifestError
from .registry import EncoderRegistry

RESULT_FORMAT_ELEMENT = "ResultFormat"


@dataclass(frozen=True)
class FormatEntry:
    """One encoder's contribution to the document."""

    identifier: str
    element_names: List[str]
    aliases: List[str]
    mime_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.identifier,
            "element_names": list(self.element_names),
            "aliases": list(self.aliases),
            "mime_type": self.mime_type,
        }


@dataclass(frozen=True)
class CapabilitiesDocument:
    """Deterministic snapshot of a registry's publishable formats."""

    identifiers: List[str]
    formats: List[FormatEntry] = field(default_factory=list)

    @classmethod
    def from_registry(cls, registry: EncoderRegistry) -> "CapabilitiesDocument":
        formats = [
            FormatEntry(
                identifier=registry.identifier_for(descriptor),
                element_names=registry.element_names(descriptor),
                aliases=list(descriptor.aliases),
                mime_type=descriptor.mime_type,
            )
            for descriptor in registry
        ]
        formats.sort(key=lambda entry: entry.identifier)
        return cls(identifiers=registry.publishable_identifiers(), formats=formats)

    def element_names(self) -> List[str]:
        """Element names for the XML listing, deduplicated and sorted."""
        names = set()
        for entry in self.formats:
            names.update(entry.element_names)
        return sorted(names)

    def to_element(self) -> ET.Element:
        root = ET.Element(RESULT_FORMAT_ELEMENT)
        for name in self.element_names():
            ET.SubElement(root, name)
        return root

    def to_xml(self) -> str:
        return ET.tostring(self.to_element(), encoding="unicode")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifiers": list(self.identifiers),
            "formats": [entry.to_dict() for entry in self.formats],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def to_cbor(self) -> bytes:
        # canonical=True keeps map key order stable across hosts
        return cbor2.dumps(self.to_dict(), canonical=True)

    @classmethod
    def from_cbor(cls, data: bytes) -> "CapabilitiesDocument":
        """Decode a CBOR manifest written by ``to_cbor``.

        Raises:
            ManifestError: If the bytes are not CBOR or the map is missing
                or mistypes a field
        """
        try:
            payload = cbor2.loads(data)
        except (cbor2.CBORDecodeError, EOFError, TypeError) as e:
            raise ManifestError(f"Invalid CBOR manifest: {e}") from e

        if not isinstance(payload, dict):
            raise ManifestError(f"Manifest must be a map, got {type(payload).__name__}")
        return cls(
            identifiers=_string_list(payload, "identifiers"),
            formats=[_format_entry(entry) for entry in _field(payload, "formats", list)],
        )


def _field(payload: Dict[str, Any], key: str, kind: type) -> Any:
    if key not in payload:
        raise ManifestError(f"Manifest is missing {key!r}")
    value = payload[key]
    if not isinstance(value, kind):
        raise ManifestError(f"Manifest field {key!r} must be a {kind.__name__}, got {value!r}")
    return value


def _string_list(payload: Dict[str, Any], key: str) -> List[str]:
    values = _field(payload, key, list)
    if not all(isinstance(value, str) for value in values):
        raise ManifestError(f"Manifest field {key!r} must hold strings, got {values!r}")
    return list(values)


def _format_entry(entry: Any) -> FormatEntry:
    if not isinstance(entry, dict):
        raise ManifestError(f"Format entry must be a map, got {entry!r}")
    return FormatEntry(
        identifier=_field(entry, "identifier", str),
        element_names=_string_list(entry, "element_names"),
        aliases=_string_list(entry, "aliases"),
        mime_type=_field(entry, "mime_type", str),
    )
