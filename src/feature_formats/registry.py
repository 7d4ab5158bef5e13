"""Ordered registry of encoder descriptors."""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .descriptor import EncoderDescriptor
from .errors import DuplicateAliasError, InvalidIdentifierConfiguration, RegistrySealedError
from .identifiers import derive_identifier

logger = logging.getLogger(__name__)


def _describe(descriptor: EncoderDescriptor) -> str:
    return descriptor.type_name or repr(descriptor.primary_alias)


class EncoderRegistry:
    """Holds encoder descriptors in registration order.

    Registration happens during startup. ``seal()`` validates every
    descriptor's identifier and freezes the registry; after that it is
    read-only and safe to share between request threads without locking.
    """

    def __init__(
        self,
        descriptors: Iterable[EncoderDescriptor] = (),
        diagnostics: Optional[logging.Logger] = None,
        strict_identifiers: bool = False,
    ):
        self.diagnostics = diagnostics or logger
        self.strict_identifiers = strict_identifiers
        self._descriptors: Tuple[EncoderDescriptor, ...] = ()
        self._owners: Dict[str, EncoderDescriptor] = {}
        self._identifiers: Dict[int, str] = {}
        self._sealed = False
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: EncoderDescriptor) -> EncoderDescriptor:
        """Add a descriptor after every existing one.

        Raises:
            RegistrySealedError: If the registry has been sealed
            DuplicateAliasError: If any alias is already registered
        """
        if self._sealed:
            raise RegistrySealedError(
                f"Cannot register {_describe(descriptor)}: registry is sealed"
            )

        claimed = {}
        for alias in descriptor.aliases:
            key = alias.casefold()
            owner = self._owners.get(key) or claimed.get(key)
            if owner is not None:
                raise DuplicateAliasError(alias, owner.type_name, descriptor.type_name)
            claimed[key] = descriptor

        self._owners.update(claimed)
        self._descriptors = self._descriptors + (descriptor,)
        return descriptor

    def seal(self) -> "EncoderRegistry":
        """Validate identifiers and make the registry read-only."""
        if not self._sealed:
            self.validate()
            self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    def validate(self) -> None:
        """Derive every identifier now so misconfiguration fails at startup.

        Raises:
            InvalidIdentifierConfiguration: On the first descriptor without
                a valid identifier, or when two descriptors would publish the
                same element name (compared case-insensitively, like aliases)
        """
        published: Dict[str, Tuple[str, EncoderDescriptor]] = {}
        for descriptor in self._descriptors:
            names = [self.identifier_for(descriptor)] + self.element_names(descriptor)
            for name in names:
                owner_name, owner = published.setdefault(name.casefold(), (name, descriptor))
                if owner is not descriptor:
                    raise InvalidIdentifierConfiguration(
                        f"Identifier {name!r} of {_describe(descriptor)} collides with "
                        f"{owner_name!r} of {_describe(owner)}"
                    )

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def descriptors(self) -> Tuple[EncoderDescriptor, ...]:
        return self._descriptors

    def __iter__(self) -> Iterator[EncoderDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def lookup(self, output_format: str) -> Optional[EncoderDescriptor]:
        """Descriptor declaring ``output_format`` as an alias, if any."""
        return self._owners.get(output_format.casefold())

    def identifier_for(self, descriptor: EncoderDescriptor) -> str:
        """Derived publishable identifier of a registered descriptor."""
        # Filled during validate(); read-only once sealed
        identifier = self._identifiers.get(id(descriptor))
        if identifier is None:
            identifier = derive_identifier(
                descriptor,
                diagnostics=self.diagnostics,
                strict=self.strict_identifiers,
            )
            if any(registered is descriptor for registered in self._descriptors):
                self._identifiers[id(descriptor)] = identifier
        return identifier

    def element_names(self, descriptor: EncoderDescriptor) -> List[str]:
        """Names a descriptor contributes to the capabilities document."""
        if descriptor.publish_all_aliases:
            return descriptor.publishable_identifiers()
        return [self.identifier_for(descriptor)]

    def publishable_identifiers(self) -> List[str]:
        """Every grammar-valid alias across the registry, deduplicated and sorted.

        Invalid aliases stay usable for negotiation; they are only left out
        of this listing. Output does not depend on registration order.
        """
        names = set()
        for descriptor in self._descriptors:
            names.update(descriptor.publishable_identifiers())
        return sorted(names)
