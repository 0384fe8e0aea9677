"""Provider interfaces and adapters for third-party contact data sources."""

from .apollo import ApolloProvider  # noqa: F401
from .base import (  # noqa: F401
    EmailValidator,
    HttpProvider,
    PeopleEnrichmentProvider,
    PhoneValidator,
    ProfileEnrichmentProvider,
    ProfileSearchProvider,
)
from .firmable import FirmableCompanyProvider, FirmableProfileProvider  # noqa: F401
from .lusha import LushaProvider  # noqa: F401
from .sample import StaticEnrichmentProvider, StaticSearchProvider  # noqa: F401
from .serp import SerpApiSearchProvider  # noqa: F401
from .verifiers import HunterEmailValidator, NumVerifyPhoneValidator  # noqa: F401

__all__ = [
    "ApolloProvider",
    "EmailValidator",
    "FirmableCompanyProvider",
    "FirmableProfileProvider",
    "HttpProvider",
    "HunterEmailValidator",
    "LushaProvider",
    "NumVerifyPhoneValidator",
    "PeopleEnrichmentProvider",
    "PhoneValidator",
    "ProfileEnrichmentProvider",
    "ProfileSearchProvider",
    "SerpApiSearchProvider",
    "StaticEnrichmentProvider",
    "StaticSearchProvider",
]
