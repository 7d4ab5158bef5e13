"""Command line tests."""

import json

import cbor2
import pytest

from feature_formats.cli import main

CONFIG = """
default_format: GML2
encoders:
  - aliases: [GML2]
    type: org.geoserver.wfs.xml.GML2OutputFormat
  - aliases: ["text/xml; subtype=gml/3.1.1", GML3]
    type: org.geoserver.wfs.xml.GML3OutputFormat
namespaces:
  ws:
    layers: [A, B, C, D]
"""


@pytest.fixture
def config_path(write_config):
    return str(write_config(CONFIG))


def test_formats(config_path, capsys):
    assert main(["--config", config_path, "formats"]) == 0
    assert capsys.readouterr().out.split() == ["GML2", "GML3"]


def test_capabilities_xml(config_path, capsys):
    assert main(["--config", config_path, "capabilities"]) == 0
    assert capsys.readouterr().out.strip() == "<ResultFormat><GML2 /><GML3OutputFormat /></ResultFormat>"


def test_capabilities_json(config_path, capsys):
    assert main(["--config", config_path, "capabilities", "--as", "json"]) == 0
    assert json.loads(capsys.readouterr().out)["identifiers"] == ["GML2", "GML3"]


def test_capabilities_cbor(config_path, capsysbinary):
    assert main(["--config", config_path, "capabilities", "--as", "cbor"]) == 0
    assert cbor2.loads(capsysbinary.readouterr().out)["identifiers"] == ["GML2", "GML3"]


def test_match(config_path, capsys):
    assert main(["--config", config_path, "match", "GetFeature", "--output-format", "gml3"]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["identifier"] == "GML3OutputFormat"
    assert result["mime_type"] == "text/xml"


def test_match_uses_default_format(config_path, capsys):
    assert main(["--config", config_path, "match", "GetFeature"]) == 0
    assert json.loads(capsys.readouterr().out)["identifier"] == "GML2"


def test_match_hits_request_fails(config_path, capsys):
    assert main(["--config", config_path, "match", "GetFeature", "--result-type", "hits"]) == 2
    assert "No encoder can serve" in capsys.readouterr().err


def test_match_rejects_malformed_param(config_path):
    with pytest.raises(SystemExit):
        main(["--config", config_path, "match", "GetFeature", "--param", "novalue"])


@pytest.mark.parametrize("reference, expected", [("3", "ws:D"), ("roads", "ws:roads"), ("-1", "ws:-1")])
def test_resolve(config_path, capsys, reference, expected):
    assert main(["--config", config_path, "resolve", "ws", reference]) == 0
    assert capsys.readouterr().out.strip() == expected


def test_resolve_with_timeout(config_path, capsys):
    assert main(["--config", config_path, "resolve", "ws", "0", "--timeout", "5"]) == 0
    assert capsys.readouterr().out.strip() == "ws:A"


def test_resolve_out_of_range(config_path, capsys):
    assert main(["--config", config_path, "resolve", "ws", "99"]) == 2
    assert "No resource '99'" in capsys.readouterr().err


def test_configuration_error_exit_code(write_config, capsys):
    path = write_config("encoders: [{aliases: [GML2], type: a.A}, {aliases: [GML2], type: b.B}]")
    assert main(["--config", str(path), "formats"]) == 1
    assert "DuplicateAliasError" in capsys.readouterr().err
