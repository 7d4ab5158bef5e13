"""Encoder descriptors and capability predicates."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from . import DEFAULT_MIME_TYPE
from .identifiers import is_valid_identifier
from .operation import Operation

CapabilityPredicate = Callable[[Operation], bool]


# =============================================================================
# Capability predicates
# =============================================================================

def accept_all(operation: Operation) -> bool:
    """Default predicate: the encoder can serve any eligible operation."""
    return True


def requires_parameter(name: str) -> CapabilityPredicate:
    """Accept only operations that carry a non-empty parameter ``name``."""

    def predicate(operation: Operation) -> bool:
        return operation.parameters.get(name) not in (None, "")

    predicate.__name__ = f"requires_parameter({name!r})"
    return predicate


def max_features_at_most(limit: int, parameter: str = "maxFeatures") -> CapabilityPredicate:
    """Accept operations whose feature limit is set and does not exceed ``limit``.

    Useful for encoders that buffer the whole result in memory.
    """

    def predicate(operation: Operation) -> bool:
        value = operation.parameters.get(parameter)
        if value is None:
            return False
        try:
            return 0 <= int(value) <= limit
        except (TypeError, ValueError):
            return False

    predicate.__name__ = f"max_features_at_most({limit})"
    return predicate


def all_of(*predicates: CapabilityPredicate) -> CapabilityPredicate:
    """Combine predicates; every one must accept."""

    def predicate(operation: Operation) -> bool:
        return all(p(operation) for p in predicates)

    predicate.__name__ = "all_of(" + ", ".join(getattr(p, "__name__", repr(p)) for p in predicates) + ")"
    return predicate


PREDICATES: Dict[str, Callable[..., CapabilityPredicate]] = {
    "accept_all": lambda: accept_all,
    "requires_parameter": requires_parameter,
    "max_features_at_most": max_features_at_most,
    "all_of": all_of,
}

# Factories whose arguments are themselves predicate declarations
COMBINATORS = frozenset({"all_of"})


# =============================================================================
# Descriptor
# =============================================================================

@dataclass(frozen=True)
class EncoderDescriptor:
    """Declares one pluggable response encoder.

    Attributes:
        aliases: Format labels clients may request, primary alias first
        predicate: Extra capability check beyond format matching
        identifier: Explicit publishable identifier, overriding derivation
        type_name: Fully qualified implementation type, used as the
            identifier of last resort
        mime_type: Content type the encoder writes
        publish_all_aliases: List every valid alias in capabilities,
            not just the derived identifier
    """

    aliases: Tuple[str, ...]
    predicate: CapabilityPredicate = field(default=accept_all, compare=False)
    identifier: Optional[str] = None
    type_name: Optional[str] = None
    mime_type: str = DEFAULT_MIME_TYPE
    publish_all_aliases: bool = False

    def __post_init__(self):
        if isinstance(self.aliases, str):
            aliases = (self.aliases,)
        else:
            aliases = tuple(self.aliases)
        if not aliases:
            raise ValueError("Encoder descriptor must declare at least one format alias")
        for alias in aliases:
            if not isinstance(alias, str) or not alias:
                raise ValueError(f"Format alias must be a non-empty string, got {alias!r}")
        object.__setattr__(self, "aliases", aliases)
        if not callable(self.predicate):
            raise TypeError(f"Capability predicate must be callable, got {self.predicate!r}")

    @classmethod
    def for_class(cls, implementation: type, aliases: Sequence[str], **kwargs: Any) -> "EncoderDescriptor":
        """Describe an encoder class, taking the type name from the class itself."""
        type_name = f"{implementation.__module__}.{implementation.__qualname__}"
        return cls(aliases=tuple(aliases), type_name=type_name, **kwargs)

    @property
    def primary_alias(self) -> str:
        return self.aliases[0]

    def declares(self, output_format: str) -> bool:
        """Whether ``output_format`` names this encoder (case-insensitive)."""
        wanted = output_format.casefold()
        return any(alias.casefold() == wanted for alias in self.aliases)

    def can_handle(self, operation: Operation) -> bool:
        return bool(self.predicate(operation))

    def publishable_identifiers(self) -> List[str]:
        """Every grammar-valid alias of this encoder, sorted."""
        return sorted({alias for alias in self.aliases if is_valid_identifier(alias)})
