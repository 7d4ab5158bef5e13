"""Command line front end.

Commands:
    formats                                  → publishable identifiers, one per line
    capabilities [--as xml|json|cbor]        → result-format section of the capabilities document
    match KIND [--output-format F] [--result-type T] [--param k=v]...
                                             → identifier and mime type of the chosen encoder
    resolve NAMESPACE REFERENCE [--timeout S]
                                             → qualified resource name
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .capabilities import CapabilitiesDocument
from .config import ServiceConfig
from .errors import DirectoryError, FeatureFormatsError, NoCompatibleEncoder
from .operation import OUTPUT_FORMAT_PARAMETER, Operation, ResultType

logger = logging.getLogger("feature_formats")


def _parse_params(pairs: List[str]) -> Dict[str, str]:
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected key=value, got {pair!r}")
        params[key] = value
    return params


def cmd_formats(config: ServiceConfig, args) -> int:
    registry = config.build_registry(diagnostics=logger)
    for identifier in registry.publishable_identifiers():
        print(identifier)
    return 0


def cmd_capabilities(config: ServiceConfig, args) -> int:
    document = CapabilitiesDocument.from_registry(config.build_registry(diagnostics=logger))
    if args.output == "xml":
        print(document.to_xml())
    elif args.output == "json":
        print(document.to_json())
    else:
        sys.stdout.buffer.write(document.to_cbor())
        sys.stdout.buffer.flush()
    return 0


def cmd_match(config: ServiceConfig, args) -> int:
    registry = config.build_registry(diagnostics=logger)
    negotiator = config.build_negotiator(registry)

    parameters = _parse_params(args.param)
    if args.output_format is not None:
        parameters[OUTPUT_FORMAT_PARAMETER] = args.output_format
    operation = Operation(args.kind, parameters, ResultType.parse(args.result_type))

    try:
        descriptor = negotiator.negotiate(operation)
    except NoCompatibleEncoder as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    print(json.dumps({
        "identifier": registry.identifier_for(descriptor),
        "aliases": list(descriptor.aliases),
        "mime_type": descriptor.mime_type,
        "type": descriptor.type_name,
    }))
    return 0


def cmd_resolve(config: ServiceConfig, args) -> int:
    directory = config.build_directory(diagnostics=logger)
    try:
        if args.timeout is not None:
            name = asyncio.run(directory.resolve_async(args.namespace, args.reference, timeout=args.timeout))
        else:
            name = directory.resolve(args.namespace, args.reference)
    except DirectoryError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    print(name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feature-formats",
        description="Response format negotiation and resource reference resolution",
    )
    parser.add_argument("--config", type=Path, default=None,
                        help="Path to YAML configuration (default: search path)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log configuration diagnostics to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("formats", help="List publishable format identifiers")
    p.set_defaults(func=cmd_formats)

    p = sub.add_parser("capabilities", help="Render the result-format capabilities section")
    p.add_argument("--as", dest="output", choices=["xml", "json", "cbor"], default="xml")
    p.set_defaults(func=cmd_capabilities)

    p = sub.add_parser("match", help="Pick the encoder for an operation")
    p.add_argument("kind", help="Operation kind, e.g. GetFeature")
    p.add_argument("--output-format", default=None)
    p.add_argument("--result-type", default=ResultType.RESULTS.value,
                   choices=[member.value for member in ResultType])
    p.add_argument("--param", action="append", default=[],
                   help="Extra operation parameter as key=value (repeatable)")
    p.set_defaults(func=cmd_match)

    p = sub.add_parser("resolve", help="Resolve a resource name or legacy id")
    p.add_argument("namespace")
    p.add_argument("reference")
    p.add_argument("--timeout", type=float, default=None,
                   help="Bound the catalog lookup to this many seconds")
    p.set_defaults(func=cmd_resolve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = ServiceConfig(args.config)
        return args.func(config, args)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except FeatureFormatsError as e:
        print(f"ERROR: {type(e).__name__}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
