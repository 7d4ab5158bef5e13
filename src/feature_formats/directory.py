"""Resolve resource references within a namespace.

A reference is either a stable resource name or a legacy positional id.
Positional ids number the namespace's layers first and its tables after
them, in whatever order the catalog currently returns. They are a
compatibility shim for clients that only know integer ids: reordering the
catalog changes what an id points at, so they are never authoritative.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

from . import QUALIFIED_NAME_SEPARATOR
from .errors import DirectoryUnavailable, NamespaceNotFound, ResourceNotFound

logger = logging.getLogger(__name__)

_POSITIONAL_REFERENCE = re.compile(r"[0-9]+")


class ResourceKind(Enum):
    LAYER = "layer"
    TABLE = "table"


@dataclass(frozen=True)
class ResourceRecord:
    name: str
    kind: ResourceKind = ResourceKind.LAYER


@dataclass
class LayersAndTables:
    """The resources of one namespace, split the way clients list them."""

    layers: List[ResourceRecord] = field(default_factory=list)
    tables: List[ResourceRecord] = field(default_factory=list)

    def entries(self) -> List[ResourceRecord]:
        """All resources in positional-id order: layers, then tables."""
        return list(self.layers) + list(self.tables)

    def __str__(self) -> str:
        return f"{[r.name for r in self.layers]};{[r.name for r in self.tables]}"


class Catalog(ABC):
    """Read interface onto whatever store owns resource metadata."""

    @abstractmethod
    def resources(self, namespace: str) -> LayersAndTables:
        """Return the namespace's resources in their current order.

        Raises:
            NamespaceNotFound: If the namespace does not exist
            OSError: If the store cannot be reached
        """


class InMemoryCatalog(Catalog):
    """Catalog backed by plain lists, as loaded from configuration."""

    def __init__(self, namespaces: Optional[Mapping[str, LayersAndTables]] = None):
        self._namespaces: Dict[str, LayersAndTables] = dict(namespaces or {})

    @classmethod
    def from_names(cls, namespaces: Mapping[str, Mapping[str, Sequence[str]]]) -> "InMemoryCatalog":
        """Build from ``{namespace: {"layers": [...], "tables": [...]}}``."""
        built = {}
        for namespace, groups in namespaces.items():
            built[namespace] = LayersAndTables(
                layers=[ResourceRecord(name, ResourceKind.LAYER) for name in groups.get("layers", [])],
                tables=[ResourceRecord(name, ResourceKind.TABLE) for name in groups.get("tables", [])],
            )
        return cls(built)

    def add(self, namespace: str, resources: LayersAndTables) -> None:
        self._namespaces[namespace] = resources

    def resources(self, namespace: str) -> LayersAndTables:
        try:
            return self._namespaces[namespace]
        except KeyError:
            raise NamespaceNotFound(namespace) from None


def qualify(namespace: str, name: str) -> str:
    return f"{namespace}{QUALIFIED_NAME_SEPARATOR}{name}"


def is_positional_reference(reference: str) -> bool:
    """True for non-negative integers written with ASCII digits only."""
    return _POSITIONAL_REFERENCE.fullmatch(reference) is not None


class ResourceDirectory:
    """Turns user-supplied references into qualified resource names."""

    def __init__(self, catalog: Catalog, diagnostics: Optional[logging.Logger] = None):
        self.catalog = catalog
        self.diagnostics = diagnostics or logger

    def _entries(self, namespace: str) -> List[ResourceRecord]:
        try:
            return self.catalog.resources(namespace).entries()
        except OSError as e:
            raise DirectoryUnavailable(f"Catalog lookup for namespace {namespace!r} failed: {e}") from e

    def _by_position(self, namespace: str, reference: str, entries: List[ResourceRecord]) -> str:
        # Compare digit counts first; huge references exceed int() conversion limits
        digits = reference.lstrip("0") or "0"
        if len(digits) > len(str(len(entries))) or int(digits) >= len(entries):
            raise ResourceNotFound(
                namespace, reference, f"positional id out of range, namespace has {len(entries)} resources"
            )
        record = entries[int(digits)]
        self.diagnostics.debug("Legacy id %s in %s resolved to %s", reference, namespace, record.name)
        return qualify(namespace, record.name)

    def resolve(self, namespace: str, reference: str) -> str:
        """Resolve ``reference`` to ``namespace:name``.

        Non-integer references (including negative numbers) are taken as
        names verbatim and never touch the catalog.

        Raises:
            ResourceNotFound: If a positional id is out of range
            NamespaceNotFound: If the catalog does not know the namespace
            DirectoryUnavailable: If the catalog lookup fails
        """
        if not is_positional_reference(reference):
            return qualify(namespace, reference)
        return self._by_position(namespace, reference, self._entries(namespace))

    async def resolve_async(self, namespace: str, reference: str, timeout: Optional[float] = None) -> str:
        """Resolve without blocking the event loop, bounded by ``timeout`` seconds.

        Raises:
            DirectoryUnavailable: Also raised when the lookup times out
        """
        if not is_positional_reference(reference):
            return qualify(namespace, reference)
        try:
            entries = await asyncio.wait_for(asyncio.to_thread(self._entries, namespace), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise DirectoryUnavailable(
                f"Catalog lookup for namespace {namespace!r} timed out after {timeout}s"
            ) from e
        return self._by_position(namespace, reference, entries)
