"""SCM host policies and the hostname registry."""

from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gitr.exceptions import UnknownHostError

from .repo import Provider


class HttpScheme(str, Enum):
    http = "http"
    https = "https"


class HostPolicy(BaseModel):
    """Clone policy for one configured SCM hostname."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    hostname: str = Field(..., description="SCM hostname, e.g. github.com")
    provider: Provider = Field(Provider.generic, description="SCM product")
    scheme: HttpScheme = Field(HttpScheme.https, description="Scheme for HTTPS clones")
    always_create_dir_hierarchy: bool = Field(
        False, description="Always clone into owner/repo shaped directories"
    )
    include_host_in_dir_hierarchy: bool = Field(
        False, description="Prefix the directory hierarchy with the hostname"
    )
    home_dir: Optional[str] = Field(
        None, description="Clone home for this host, overrides the global one"
    )

    @field_validator("hostname")
    @classmethod
    def validate_hostname(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("hostname must be a non-empty string")
        if "/" in v or ":" in v:
            raise ValueError(f"hostname must not contain a scheme or path: {v}")
        return v

    @field_validator("home_dir")
    @classmethod
    def validate_home_dir(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class ScmHostRegistry:
    """Read-only hostname to ``HostPolicy`` mapping.

    Hostnames are DNS names and compare case-insensitively.
    """

    def __init__(self, policies: Iterable[HostPolicy]):
        self._policies: Dict[str, HostPolicy] = {}
        for policy in policies:
            key = policy.hostname.lower()
            if key in self._policies:
                raise ValueError(f"Duplicate SCM host: {policy.hostname}")
            self._policies[key] = policy

    def lookup(self, hostname: str) -> HostPolicy:
        try:
            return self._policies[hostname.lower()]
        except KeyError:
            raise UnknownHostError(hostname) from None

    def hostnames(self) -> List[str]:
        return [policy.hostname for policy in self._policies.values()]

    def __contains__(self, hostname: str) -> bool:
        return hostname.lower() in self._policies

    def __len__(self) -> int:
        return len(self._policies)
