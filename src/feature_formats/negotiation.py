"""Capability negotiation: pick the encoder for a query operation."""

import logging
from typing import Iterable, Optional

from . import QUERY_OPERATIONS
from .descriptor import EncoderDescriptor
from .errors import NoCompatibleEncoder
from .operation import Operation, ResultType
from .registry import EncoderRegistry

logger = logging.getLogger(__name__)


class CapabilityNegotiator:
    """Matches operations against an encoder registry.

    Only query operations asking for actual results are eligible. Hit-count
    and validation-only requests never match; the dispatcher routes them
    elsewhere. When several encoders could serve a request the first one
    registered wins.
    """

    def __init__(
        self,
        registry: EncoderRegistry,
        default_format: Optional[str] = None,
        query_operations: Iterable[str] = QUERY_OPERATIONS,
    ):
        self.registry = registry
        self.default_format = default_format
        self._query_operations = frozenset(kind.casefold() for kind in query_operations)

    def is_query(self, operation: Operation) -> bool:
        return operation.kind.casefold() in self._query_operations

    def requested_format(self, operation: Operation) -> Optional[str]:
        return operation.output_format or self.default_format

    def match(self, operation: Operation) -> Optional[EncoderDescriptor]:
        """Return the first accepting descriptor, or None."""
        if not self.is_query(operation):
            return None
        if operation.result_type is not ResultType.RESULTS:
            return None

        output_format = self.requested_format(operation)
        for descriptor in self.registry:
            if output_format is not None and not descriptor.declares(output_format):
                continue
            if descriptor.can_handle(operation):
                return descriptor
        return None

    def negotiate(self, operation: Operation) -> EncoderDescriptor:
        """Like ``match`` but raise when nothing can serve the operation.

        Raises:
            NoCompatibleEncoder: With the reason negotiation failed
        """
        descriptor = self.match(operation)
        if descriptor is not None:
            return descriptor

        output_format = self.requested_format(operation)
        if not self.is_query(operation):
            reason = "not a query operation"
        elif operation.result_type is not ResultType.RESULTS:
            reason = f"result type {operation.result_type.value!r} is not served by an encoder"
        elif output_format is not None and self.registry.lookup(output_format) is None:
            reason = "format not supported"
        else:
            reason = "no encoder accepted the request"
        logger.debug("Negotiation failed for %s (%s): %s", operation.kind, output_format, reason)
        raise NoCompatibleEncoder(operation.kind, output_format, reason)
