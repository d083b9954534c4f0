"""Configuration models.

This module provides the frozen Pydantic models for every configuration
section and the top-level Config container.
"""

from enum import StrEnum
from typing import ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class StorageBackend(StrEnum):
    """Object storage backends."""

    MEMORY = "memory"
    FILESYSTEM = "filesystem"
    S3 = "s3"


class S3Config(BaseModel):
    """S3 client settings.

    Attributes:
        region: AWS region (empty uses the boto3 default chain).
        endpoint_url: Endpoint for S3-compatible services (empty for AWS).
        request_timeout_s: Connect and read timeout in seconds.
        max_attempts: botocore retry attempts per request.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    region: str = ""
    endpoint_url: str = ""
    request_timeout_s: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=5, ge=1)


class StorageConfig(BaseModel):
    """Storage configuration section.

    Attributes:
        backend: Which object store adapter to build.
        root: Root directory for the filesystem backend.
        s3: Settings for the s3 backend.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    backend: StorageBackend = StorageBackend.MEMORY
    root: str = ""
    s3: S3Config = Field(default_factory=S3Config)

    @model_validator(mode="after")
    def require_root_for_filesystem(self) -> Self:
        if self.backend is StorageBackend.FILESYSTEM and not self.root:
            msg = "storage.root is required for the filesystem backend"
            raise ValueError(msg)
        return self


class WorkspaceConfig(BaseModel):
    """Scoped workspace configuration section.

    Attributes:
        root: Parent directory for workspaces (empty uses the system temp dir).
        prefix: Name prefix for each workspace directory.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    root: str = ""
    prefix: str = Field(default="git-", min_length=1)


class RepositoryConfig(BaseModel):
    """Repository operation configuration section.

    Attributes:
        history_limit: Commits returned by history reads when no limit is given.
        initial_commit_message: Message of the commit created at initialize.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    history_limit: int = Field(default=50, ge=1)
    initial_commit_message: str = Field(default="Initial commit", min_length=1)


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


class Config(BaseModel):
    """Top-level blobgit configuration."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
