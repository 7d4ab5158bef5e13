"""Pytest fixtures for negotiation, derivation and resolution tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from feature_formats import (
    EncoderDescriptor,
    EncoderRegistry,
    InMemoryCatalog,
    Operation,
    ResourceDirectory,
    ResultType,
)
from feature_formats.operation import OUTPUT_FORMAT_PARAMETER

GML2_TYPE = "org.geoserver.wfs.xml.GML2OutputFormat"
GML3_TYPE = "org.geoserver.wfs.xml.GML3OutputFormat"
SHAPE_ZIP_TYPE = "org.geoserver.wfs.response.ShapeZipOutputFormat"


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    """Keep developer environment variables out of configuration tests."""
    for var in (
        "FEATURE_FORMATS_CONFIG",
        "FEATURE_FORMATS_DEFAULT_FORMAT",
        "FEATURE_FORMATS_STRICT_IDENTIFIERS",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def gml2():
    return EncoderDescriptor(("GML2", "text/xml; subtype=gml/2.1.2"), type_name=GML2_TYPE)


@pytest.fixture
def gml3():
    """Primary alias is not a valid element name, so the type name is published."""
    return EncoderDescriptor(("text/xml; subtype=gml/3.1.1", "GML3"), type_name=GML3_TYPE)


@pytest.fixture
def shape_zip():
    return EncoderDescriptor(("SHAPE-ZIP",), type_name=SHAPE_ZIP_TYPE, mime_type="application/zip")


@pytest.fixture
def registry(gml2, gml3, shape_zip):
    """Sealed registry with three WFS encoders."""
    return EncoderRegistry([gml2, gml3, shape_zip]).seal()


@pytest.fixture
def make_operation():
    """Factory for GetFeature-style operations."""

    def _make(kind="GetFeature", output_format=None, result_type=ResultType.RESULTS, **params):
        if output_format is not None:
            params[OUTPUT_FORMAT_PARAMETER] = output_format
        return Operation(kind, params, result_type)

    return _make


@pytest.fixture
def catalog():
    return InMemoryCatalog.from_names({
        "ws": {"layers": ["A", "B", "C", "D"]},
        "topp": {"layers": ["states", "roads"], "tables": ["census"]},
    })


@pytest.fixture
def directory(catalog):
    return ResourceDirectory(catalog)


@pytest.fixture
def write_config(tmp_path):
    """Write YAML text to a temporary config file and return its path."""

    def _write(text: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
