"""Unified data models for the discovery pipeline, providers, and front ends."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


def clamp_confidence(value: float) -> float:
    """Clamp a confidence score into the ``[0, 1]`` interval."""

    return round(max(0.0, min(float(value), 1.0)), 4)


# --- Query Subject ---

class DescriptorStage(str, Enum):
    """How far a :class:`PersonDescriptor` has progressed through enrichment."""

    PARSED = "parsed"
    REGION_DEFAULTED = "region_defaulted"
    PROFILE_RESOLVED = "profile_resolved"


@dataclass(frozen=True, slots=True)
class PersonDescriptor:
    """Immutable description of the person being looked up.

    Enrichment never mutates a descriptor; the ``with_*`` helpers return a new
    value tagged with the stage that produced it.
    """

    first_name: str = ""
    last_name: str = ""
    title: Optional[str] = None
    company: Optional[str] = None
    domain: Optional[str] = None
    location: Optional[str] = None
    profile_url: Optional[str] = None
    stage: DescriptorStage = DescriptorStage.PARSED

    @property
    def full_name(self) -> str:
        return " ".join(filter(None, [self.first_name, self.last_name])).strip()

    def display_name(self) -> str:
        """Return a readable name for logs."""
        return self.full_name or "(Unnamed Contact)"

    def with_region(self, location: str) -> "PersonDescriptor":
        return replace(self, location=location, stage=DescriptorStage.REGION_DEFAULTED)

    def with_profile_url(self, profile_url: str) -> "PersonDescriptor":
        return replace(self, profile_url=profile_url, stage=DescriptorStage.PROFILE_RESOLVED)

    def with_domain(self, domain: str) -> "PersonDescriptor":
        return replace(self, domain=domain)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["stage"] = self.stage.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PersonDescriptor":
        return cls(
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            title=data.get("title"),
            company=data.get("company"),
            domain=data.get("domain"),
            location=data.get("location"),
            profile_url=data.get("profile_url"),
            stage=DescriptorStage(data.get("stage") or DescriptorStage.PARSED.value),
        )


# --- Profile Search ---

@dataclass(slots=True)
class CandidateProfileHit:
    """One search result believed to reference a professional profile."""

    url: str
    title: str = ""
    snippet: str = ""
    from_knowledge_panel: bool = False
    position: Optional[int] = None


@dataclass(slots=True)
class ScoredProfileHit:
    """A :class:`CandidateProfileHit` annotated with its match confidence."""

    url: str
    title: str = ""
    snippet: str = ""
    confidence: float = 0.0
    name_in_slug: bool = False
    from_knowledge_panel: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoredProfileHit":
        return cls(**{key: data[key] for key in cls.__dataclass_fields__ if key in data})


# --- Contact Fields ---

EMAIL = "email"
PHONE = "phone"


@dataclass(slots=True)
class ContactFieldRecord:
    """A single contact value reported by one provider."""

    channel: str
    value: str
    source: str
    subtype: Optional[str] = None
    confidence: float = 0.5
    verified: Optional[bool] = None

    def __post_init__(self) -> None:
        self.confidence = clamp_confidence(self.confidence)


@dataclass(slots=True)
class ConsolidatedFieldRecord:
    """A contact value merged across providers, annotated with every source."""

    channel: str
    value: str
    subtype: Optional[str] = None
    confidence: float = 0.0
    sources: List[str] = field(default_factory=list)
    verified: bool = False
    non_local: bool = False
    validation_details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.confidence = clamp_confidence(self.confidence)

    def boost(self, amount: float) -> None:
        self.confidence = clamp_confidence(self.confidence + amount)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsolidatedFieldRecord":
        return cls(
            channel=data["channel"],
            value=data["value"],
            subtype=data.get("subtype"),
            confidence=data.get("confidence", 0.0),
            sources=list(data.get("sources") or []),
            verified=bool(data.get("verified", False)),
            non_local=bool(data.get("non_local", False)),
            validation_details=dict(data.get("validation_details") or {}),
        )


# --- Provider Responses ---

@dataclass
class EnrichmentResponse:
    """Normalised response returned by people and profile enrichment providers."""

    emails: List[ContactFieldRecord] = field(default_factory=list)
    phones: List[ContactFieldRecord] = field(default_factory=list)
    profile_url: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None


@dataclass
class ValidationOutcome:
    """Result of validating one email address or phone number."""

    value: str
    valid: bool
    confidence: float = 0.0
    reason: str = ""
    skipped: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ValidationOutcome":
        return cls(
            value=data["value"],
            valid=bool(data.get("valid", False)),
            confidence=data.get("confidence", 0.0),
            reason=data.get("reason", ""),
            skipped=bool(data.get("skipped", False)),
            details=dict(data.get("details") or {}),
        )


@dataclass
class ProviderStatus:
    """Outcome of a single provider call within a discovery run."""

    status: str
    message: str = ""
    email_count: int = 0
    phone_count: int = 0

    @classmethod
    def ok(cls, response: Optional[EnrichmentResponse] = None) -> "ProviderStatus":
        if response is None:
            return cls(status="ok")
        return cls(status="ok", email_count=len(response.emails), phone_count=len(response.phones))

    @classmethod
    def error(cls, message: str) -> "ProviderStatus":
        return cls(status="error", message=message)

    @classmethod
    def skipped(cls, message: str) -> "ProviderStatus":
        return cls(status="skipped", message=message)


# --- Discovery Result ---

@dataclass
class ValidationSummary:
    """Validation outcomes for the top-ranked email and phone."""

    email: Optional[ValidationOutcome] = None
    phone: Optional[ValidationOutcome] = None


@dataclass
class RunMetadata:
    """Bookkeeping attached to every discovery result."""

    timestamp: str = ""
    duration_ms: int = 0
    from_cache: bool = False
    sources: Dict[str, ProviderStatus] = field(default_factory=dict)


@dataclass
class DiscoveryResult:
    """Consolidated output of one discovery run; the unit stored in the cache."""

    person: PersonDescriptor
    cache_key: str = ""
    profile_url: Optional[str] = None
    profile_match: Optional[ScoredProfileHit] = None
    emails: List[ConsolidatedFieldRecord] = field(default_factory=list)
    phones: List[ConsolidatedFieldRecord] = field(default_factory=list)
    validation: ValidationSummary = field(default_factory=ValidationSummary)
    metadata: RunMetadata = field(default_factory=RunMetadata)

    @property
    def top_email(self) -> Optional[ConsolidatedFieldRecord]:
        return self.emails[0] if self.emails else None

    @property
    def top_phone(self) -> Optional[ConsolidatedFieldRecord]:
        return self.phones[0] if self.phones else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "person": self.person.to_dict(),
            "cache_key": self.cache_key,
            "profile_url": self.profile_url,
            "profile_match": self.profile_match.to_dict() if self.profile_match else None,
            "emails": [record.to_dict() for record in self.emails],
            "phones": [record.to_dict() for record in self.phones],
            "validation": {
                "email": self.validation.email.to_dict() if self.validation.email else None,
                "phone": self.validation.phone.to_dict() if self.validation.phone else None,
            },
            "metadata": {
                "timestamp": self.metadata.timestamp,
                "duration_ms": self.metadata.duration_ms,
                "from_cache": self.metadata.from_cache,
                "sources": {name: asdict(status) for name, status in self.metadata.sources.items()},
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DiscoveryResult":
        validation = data.get("validation") or {}
        metadata = data.get("metadata") or {}
        profile_match = data.get("profile_match")
        return cls(
            person=PersonDescriptor.from_dict(data.get("person") or {}),
            cache_key=data.get("cache_key", ""),
            profile_url=data.get("profile_url"),
            profile_match=ScoredProfileHit.from_dict(profile_match) if profile_match else None,
            emails=[ConsolidatedFieldRecord.from_dict(item) for item in data.get("emails") or []],
            phones=[ConsolidatedFieldRecord.from_dict(item) for item in data.get("phones") or []],
            validation=ValidationSummary(
                email=ValidationOutcome.from_dict(validation["email"]) if validation.get("email") else None,
                phone=ValidationOutcome.from_dict(validation["phone"]) if validation.get("phone") else None,
            ),
            metadata=RunMetadata(
                timestamp=metadata.get("timestamp", ""),
                duration_ms=int(metadata.get("duration_ms", 0)),
                from_cache=bool(metadata.get("from_cache", False)),
                sources={
                    name: ProviderStatus(**status)
                    for name, status in (metadata.get("sources") or {}).items()
                },
            ),
        )


@dataclass
class BatchResult:
    """Outcome of running discovery over a list of inputs."""

    total: int = 0
    processed: int = 0
    successful: int = 0
    failed: int = 0
    results: List[DiscoveryResult] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    started_at: str = ""
    finished_at: str = ""
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "processed": self.processed,
            "successful": self.successful,
            "failed": self.failed,
            "results": [result.to_dict() for result in self.results],
            "errors": list(self.errors),
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "duration_ms": self.duration_ms,
        }


# --- Watchlist ---

@dataclass
class WatchlistEntry:
    """A tracked contact with its last known role and a change history."""

    id: str
    first_name: str
    last_name: str
    company: Optional[str] = None
    title: Optional[str] = None
    profile_url: Optional[str] = None
    email: Optional[str] = None
    added_at: str = ""
    last_checked: Optional[str] = None
    last_title: Optional[str] = None
    last_company: Optional[str] = None
    change_history: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return " ".join(filter(None, [self.first_name, self.last_name])).strip()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WatchlistEntry":
        return cls(**{key: data[key] for key in cls.__dataclass_fields__ if key in data})


__all__ = [
    "EMAIL",
    "PHONE",
    "BatchResult",
    "CandidateProfileHit",
    "ConsolidatedFieldRecord",
    "ContactFieldRecord",
    "DescriptorStage",
    "DiscoveryResult",
    "EnrichmentResponse",
    "PersonDescriptor",
    "ProviderStatus",
    "RunMetadata",
    "ScoredProfileHit",
    "ValidationOutcome",
    "ValidationSummary",
    "WatchlistEntry",
    "clamp_confidence",
]
