"""Domain contracts for provisioning requests and resource records."""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

_DOMAIN_PATTERN = r"^(?=.{1,253}$)([a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}$"
_USERNAME_PATTERN = r"^[a-z_][a-z0-9_-]{0,31}$"
_TLD_SUFFIX = re.compile(r"\.[^.]+$")
_NON_ALNUM = re.compile(r"[^a-z0-9]")


class SystemUserStatus(str, Enum):
    """Lifecycle of a tenant Unix account record."""

    ACTIVE = "active"
    SUSPENDED = "suspended"


class DomainStatus(str, Enum):
    """Lifecycle of a hosted domain record."""

    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class RuntimeType(str, Enum):
    """Request handler wired into a domain's vhost."""

    STATIC = "static"
    PHP = "php"
    NODEJS = "nodejs"


class CreateSystemUserRequest(BaseModel):
    """Input for creating one tenant Unix account."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    username: str = Field(pattern=_USERNAME_PATTERN)
    password: str | None = Field(default=None, min_length=1, repr=False)
    shell: str | None = None
    ssh_enabled: bool = True
    sftp_only: bool = False
    owner_id: str | None = None


class CreateDomainRequest(BaseModel):
    """Input for creating one hosted domain."""

    model_config = ConfigDict(frozen=True, extra="forbid", regex_engine="python-re")

    name: str = Field(pattern=_DOMAIN_PATTERN)
    runtime: RuntimeType = RuntimeType.PHP
    php_version: str | None = None
    node_port: int | None = Field(default=None, gt=0, lt=65536)
    www_redirect: bool = True
    custom_error_pages: dict[str, str] | None = None
    owner_id: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class SystemUserRecord(BaseModel):
    """Stored state of one provisioned Unix account."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    username: str
    uid: int
    gid: int
    home_directory: str
    shell: str
    status: SystemUserStatus = SystemUserStatus.ACTIVE
    ssh_enabled: bool = True
    sftp_only: bool = False
    owner_id: str | None = None
    created_at: datetime


class DomainRecord(BaseModel):
    """Stored state of one hosted domain."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    status: DomainStatus = DomainStatus.PENDING
    document_root: str
    runtime: RuntimeType
    php_version: str | None = None
    www_redirect: bool = True
    system_user_id: str
    owner_id: str | None = None
    created_at: datetime


def username_for_domain(domain: str) -> str:
    """Derive a tenant username: drop the TLD, keep alphanumerics, cap at 28."""
    username = _NON_ALNUM.sub("", _TLD_SUFFIX.sub("", domain.lower()))[:28]
    if not username or not username[0].isalpha():
        username = f"u{username}"
    return username
