"""Record provider package."""

from networth.services.providers.interface import (
    ProviderError,
    RawRecord,
    RecordProvider,
    WritableRecordProvider,
)
from networth.services.providers.http import (
    CATEGORY_PATHS,
    HttpRecordProvider,
    create_http_client,
    create_http_providers,
)
from networth.services.providers.memory import InMemoryRecordProvider

__all__ = [
    "CATEGORY_PATHS",
    "HttpRecordProvider",
    "InMemoryRecordProvider",
    "ProviderError",
    "RawRecord",
    "RecordProvider",
    "WritableRecordProvider",
    "create_http_client",
    "create_http_providers",
]
