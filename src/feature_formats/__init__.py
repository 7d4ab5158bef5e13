"""Response format negotiation and resource reference resolution for feature services."""

__version__ = "0.1.0"

# Query operations whose results are written by a pluggable encoder
QUERY_OPERATIONS = ("GetFeature", "GetFeatureWithLock")

DEFAULT_MIME_TYPE = "text/xml"

# namespace:name
QUALIFIED_NAME_SEPARATOR = ":"

from .errors import (  # noqa: E402
    FeatureFormatsError,
    NoCompatibleEncoder,
    RegistryError,
    DuplicateAliasError,
    InvalidIdentifierConfiguration,
    RegistrySealedError,
    ConfigError,
    ManifestError,
    DirectoryError,
    ResourceNotFound,
    NamespaceNotFound,
    DirectoryUnavailable,
)
from .identifiers import is_valid_identifier, derive_identifier, short_type_name  # noqa: E402
from .operation import Operation, ResultType  # noqa: E402
from .descriptor import (  # noqa: E402
    EncoderDescriptor,
    accept_all,
    requires_parameter,
    max_features_at_most,
    all_of,
)
from .registry import EncoderRegistry  # noqa: E402
from .negotiation import CapabilityNegotiator  # noqa: E402
from .directory import (  # noqa: E402
    Catalog,
    InMemoryCatalog,
    LayersAndTables,
    ResourceDirectory,
    ResourceKind,
    ResourceRecord,
)
from .capabilities import CapabilitiesDocument, FormatEntry  # noqa: E402

__all__ = [
    "QUERY_OPERATIONS",
    "DEFAULT_MIME_TYPE",
    "QUALIFIED_NAME_SEPARATOR",
    "FeatureFormatsError",
    "NoCompatibleEncoder",
    "RegistryError",
    "DuplicateAliasError",
    "InvalidIdentifierConfiguration",
    "RegistrySealedError",
    "ConfigError",
    "ManifestError",
    "DirectoryError",
    "ResourceNotFound",
    "NamespaceNotFound",
    "DirectoryUnavailable",
    "is_valid_identifier",
    "derive_identifier",
    "short_type_name",
    "Operation",
    "ResultType",
    "EncoderDescriptor",
    "accept_all",
    "requires_parameter",
    "max_features_at_most",
    "all_of",
    "EncoderRegistry",
    "CapabilityNegotiator",
    "Catalog",
    "InMemoryCatalog",
    "LayersAndTables",
    "ResourceDirectory",
    "ResourceKind",
    "ResourceRecord",
    "CapabilitiesDocument",
    "FormatEntry",
]
