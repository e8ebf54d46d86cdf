"""Configuration models shared by the confcheck tests."""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

from confcheck import INT_UNDEFINED


@dataclass
class Limits:
    max_depth: int = field(default=INT_UNDEFINED, metadata={"json": "maxDepth,omitempty", "yaml": "max_depth"})
    timeout: str = field(default="", metadata={"json": "timeout", "yaml": "timeout"})


@dataclass
class Scan:
    mode: str = field(default="", metadata={"json": "mode", "yaml": "mode"})
    pattern: str = field(default="", metadata={"json": "pattern", "yaml": "pattern"})
    limits: Limits = field(default_factory=Limits, metadata={"json": "limits", "yaml": "limits"})


@dataclass
class Settings:
    name: str = field(default="", metadata={"json": "name", "yaml": "project_name"})
    token: str = field(default="", metadata={"json": "token", "yaml": "token"})
    password: str = field(default="", metadata={"json": "password", "yaml": "password"})
    enabled: bool = field(default=False, metadata={"json": "enabled", "yaml": "enabled"})
    retries: int = field(default=INT_UNDEFINED, metadata={"json": "retries", "yaml": "retries"})
    scan: Scan = field(default_factory=Scan, metadata={"json": "scan", "yaml": "scan"})


class ApiSection(BaseModel):
    host: str = Field(default="", json_schema_extra={"yaml": "api_host"}, alias="apiHost")
    port: int = INT_UNDEFINED

    model_config = ConfigDict(populate_by_name=True)


class ServiceSettings(BaseModel):
    api: ApiSection = Field(default_factory=ApiSection)
    backup: ApiSection | None = None
    label: str = ""


