"""Operation descriptor consumed (read-only) by capability negotiation."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

OUTPUT_FORMAT_PARAMETER = "outputFormat"


class ResultType(Enum):
    """What the caller wants back from a query operation."""

    RESULTS = "results"
    HITS = "hits"
    VALIDATE = "validate"

    @classmethod
    def parse(cls, value: str) -> "ResultType":
        try:
            return cls(value.lower())
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown result type {value!r}, expected one of: {valid}") from None


@dataclass(frozen=True)
class Operation:
    """A dispatched service operation.

    Parameters are frozen into a read-only mapping so capability predicates
    cannot mutate the request they inspect.
    """

    kind: str
    parameters: Mapping[str, Any] = field(default_factory=dict)
    result_type: ResultType = ResultType.RESULTS

    def __post_init__(self):
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @property
    def output_format(self) -> Optional[str]:
        """Format label requested by the client, if any."""
        value = self.parameters.get(OUTPUT_FORMAT_PARAMETER)
        return str(value) if value is not None else None
