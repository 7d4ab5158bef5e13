"""Typed failures raised by negotiation, derivation and resolution."""

from typing import Optional


class FeatureFormatsError(Exception):
    """Base class for all errors raised by this package."""


# =============================================================================
# Negotiation
# =============================================================================

class NoCompatibleEncoder(FeatureFormatsError):
    """No registered encoder can serve the operation.

    This is an expected, user-facing outcome ("format not supported"),
    not an internal fault.
    """

    def __init__(self, kind: str, output_format: Optional[str] = None, reason: Optional[str] = None):
        self.kind = kind
        self.output_format = output_format
        self.reason = reason
        message = f"No encoder can serve {kind!r}"
        if output_format is not None:
            message += f" in format {output_format!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


# =============================================================================
# Registry / configuration time
# =============================================================================

class RegistryError(FeatureFormatsError):
    """Encoder registry misconfiguration. Aborts startup."""


class DuplicateAliasError(RegistryError):
    """Two descriptors in one registry declare the same format alias."""

    def __init__(self, alias: str, existing_type: Optional[str], new_type: Optional[str]):
        self.alias = alias
        self.existing_type = existing_type
        self.new_type = new_type
        super().__init__(
            f"Format alias {alias!r} is already registered by {existing_type or '<anonymous>'}; "
            f"refusing to register it again for {new_type or '<anonymous>'}"
        )


class InvalidIdentifierConfiguration(RegistryError):
    """A descriptor cannot produce a grammar-valid publishable identifier."""


class RegistrySealedError(RegistryError):
    """Registration attempted after the registry was sealed."""


class ConfigError(FeatureFormatsError):
    """Malformed configuration file or value."""


class ManifestError(FeatureFormatsError):
    """A serialized capabilities manifest cannot be decoded."""


# =============================================================================
# Resource directory
# =============================================================================

class DirectoryError(FeatureFormatsError):
    """Base class for resource reference resolution failures."""


class ResourceNotFound(DirectoryError):
    """The referenced position or name does not exist in the namespace."""

    def __init__(self, namespace: str, reference: str, detail: Optional[str] = None):
        self.namespace = namespace
        self.reference = reference
        message = f"No resource {reference!r} in namespace {namespace!r}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class NamespaceNotFound(DirectoryError):
    """The namespace itself is unknown to the catalog."""

    def __init__(self, namespace: str):
        self.namespace = namespace
        super().__init__(f"Unknown namespace {namespace!r}")


class DirectoryUnavailable(DirectoryError):
    """The catalog lookup failed for infrastructural reasons.

    Retryable at the caller's discretion; never retried internally.
    """
