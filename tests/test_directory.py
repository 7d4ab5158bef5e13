"""Resource reference resolution tests.

Positional ids are a legacy shim: they index the namespace's current
ordering, so these tests pin down that reordering changes the result.
"""

import time

import pytest

from feature_formats import (
    Catalog,
    DirectoryUnavailable,
    InMemoryCatalog,
    LayersAndTables,
    NamespaceNotFound,
    ResourceDirectory,
    ResourceKind,
    ResourceNotFound,
    ResourceRecord,
)
from feature_formats.directory import is_positional_reference


class FailingCatalog(Catalog):
    """Catalog whose store is unreachable."""

    def __init__(self):
        self.calls = 0

    def resources(self, namespace):
        self.calls += 1
        raise ConnectionError("catalog store unreachable")


class SlowCatalog(Catalog):
    def __init__(self, inner, delay):
        self.inner = inner
        self.delay = delay

    def resources(self, namespace):
        time.sleep(self.delay)
        return self.inner.resources(namespace)


def test_positional_reference(directory):
    assert directory.resolve("ws", "3") == "ws:D"
    assert directory.resolve("ws", "0") == "ws:A"


def test_positional_reference_out_of_range(directory):
    with pytest.raises(ResourceNotFound) as excinfo:
        directory.resolve("ws", "99")
    assert excinfo.value.namespace == "ws"
    assert excinfo.value.reference == "99"


@pytest.mark.parametrize("reference", ["9" * 5000, "1" + "0" * 10])
def test_oversized_positional_reference_is_not_found(directory, reference):
    with pytest.raises(ResourceNotFound):
        directory.resolve("ws", reference)


def test_positional_reference_with_leading_zeros(directory):
    assert directory.resolve("ws", "0" * 5000 + "2") == "ws:C"
    with pytest.raises(ResourceNotFound):
        directory.resolve("ws", "0004")


def test_name_reference_is_used_verbatim(directory):
    assert directory.resolve("ws", "roads") == "ws:roads"


@pytest.mark.parametrize("reference", ["-1", "+3", "3.0", " 3", "3 ", "0x1", "٣", ""])
def test_non_integer_references_are_names(directory, reference):
    assert directory.resolve("ws", reference) == f"ws:{reference}"


@pytest.mark.parametrize("reference, expected", [
    ("0", True),
    ("007", True),
    ("12345", True),
    ("-1", False),
    ("+1", False),
    ("1e3", False),
    ("", False),
])
def test_is_positional_reference(reference, expected):
    assert is_positional_reference(reference) is expected


def test_leading_zeros_are_positional(directory):
    assert directory.resolve("ws", "003") == "ws:D"


def test_tables_continue_after_layers(directory):
    assert directory.resolve("topp", "0") == "topp:states"
    assert directory.resolve("topp", "1") == "topp:roads"
    assert directory.resolve("topp", "2") == "topp:census"
    with pytest.raises(ResourceNotFound):
        directory.resolve("topp", "3")


def test_positional_ids_follow_reordering():
    catalog = InMemoryCatalog.from_names({"ws": {"layers": ["A", "B", "C", "D"]}})
    directory = ResourceDirectory(catalog)
    assert directory.resolve("ws", "3") == "ws:D"

    catalog.add("ws", LayersAndTables(layers=[ResourceRecord(n) for n in ["D", "C", "B", "A"]]))
    assert directory.resolve("ws", "3") == "ws:A"
    assert directory.resolve("ws", "D") == "ws:D"


def test_unknown_namespace_is_distinct_from_missing_resource(directory):
    with pytest.raises(NamespaceNotFound):
        directory.resolve("nowhere", "0")


def test_name_reference_in_unknown_namespace_does_not_touch_catalog():
    catalog = FailingCatalog()
    directory = ResourceDirectory(catalog)
    assert directory.resolve("nowhere", "roads") == "nowhere:roads"
    assert catalog.calls == 0


def test_catalog_failure_surfaces_as_unavailable():
    catalog = FailingCatalog()
    directory = ResourceDirectory(catalog)

    with pytest.raises(DirectoryUnavailable) as excinfo:
        directory.resolve("ws", "1")

    assert isinstance(excinfo.value.__cause__, ConnectionError)
    assert catalog.calls == 1  # no internal retry


def test_layers_and_tables_entries():
    resources = LayersAndTables(
        layers=[ResourceRecord("states")],
        tables=[ResourceRecord("census", ResourceKind.TABLE)],
    )
    assert [r.name for r in resources.entries()] == ["states", "census"]
    assert str(resources) == "['states'];['census']"


@pytest.mark.asyncio
@pytest.mark.timeout(10)
async def test_resolve_async(directory):
    assert await directory.resolve_async("ws", "3") == "ws:D"
    assert await directory.resolve_async("ws", "roads") == "ws:roads"
    with pytest.raises(ResourceNotFound):
        await directory.resolve_async("ws", "99")
    with pytest.raises(ResourceNotFound):
        await directory.resolve_async("ws", "9" * 5000)


@pytest.mark.asyncio
@pytest.mark.timeout(10)
async def test_resolve_async_times_out(catalog):
    directory = ResourceDirectory(SlowCatalog(catalog, delay=0.5))
    with pytest.raises(DirectoryUnavailable, match="timed out"):
        await directory.resolve_async("ws", "3", timeout=0.05)


@pytest.mark.asyncio
@pytest.mark.timeout(10)
async def test_resolve_async_propagates_catalog_failure():
    directory = ResourceDirectory(FailingCatalog())
    with pytest.raises(DirectoryUnavailable):
        await directory.resolve_async("ws", "0", timeout=5)
