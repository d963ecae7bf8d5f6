"""Typed configuration models.

Every field has a default so a missing config.yaml still produces a usable
configuration; real deployments override the registry project at least.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.infra.constants import DEFAULT_CONSTANTS


class RegistryConfig(BaseModel):
    """Container registry the built images are pushed to."""

    model_config = ConfigDict(extra="forbid")

    host: str = Field(
        default=DEFAULT_CONSTANTS.DEFAULT_REGISTRY_HOST,
        description="Registry hostname, optionally with port",
    )
    project_id: str = Field(
        default="my-project",
        description="Registry project or namespace the image lives under",
    )

    @field_validator("host")
    @classmethod
    def _validate_host(cls, value: str) -> str:
        if not DEFAULT_CONSTANTS.REGISTRY_PATTERN.match(value):
            raise ValueError(
                f"Invalid registry host '{value}' "
                "(expected host.domain, host:port or host.domain/path)"
            )
        return value


class ManifestsConfig(BaseModel):
    """Location and placeholder of the manifest templates."""

    model_config = ConfigDict(extra="forbid")

    directory: str = Field(
        default=DEFAULT_CONSTANTS.MANIFESTS_DIR,
        description="Manifest root, relative to the project root",
    )
    image_placeholder: str = Field(
        default=DEFAULT_CONSTANTS.IMAGE_PLACEHOLDER,
        min_length=1,
        description="Literal token replaced with the image reference",
    )


class ClusterConfig(BaseModel):
    """Cluster access settings."""

    model_config = ConfigDict(extra="forbid")

    backend: Literal["kubectl", "kr8s"] = "kubectl"
    production_namespace: str = DEFAULT_CONSTANTS.PRODUCTION_NAMESPACE


class RolloutConfig(BaseModel):
    """Rollout verification bounds."""

    model_config = ConfigDict(extra="forbid")

    timeout_seconds: float = Field(
        default=DEFAULT_CONSTANTS.ROLLOUT_TIMEOUT_SECONDS, ge=0
    )
    poll_interval_seconds: float = Field(
        default=DEFAULT_CONSTANTS.ROLLOUT_POLL_INTERVAL_SECONDS, gt=0
    )


class BuildConfig(BaseModel):
    """How tests are run and images are built."""

    model_config = ConfigDict(extra="forbid")

    builder: Literal["docker", "cloudbuild"] = "docker"
    test_command: list[str] = Field(default_factory=lambda: ["go", "test", "./..."])
    context: str = Field(default=".", description="Build context directory")


class LoggingConfig(BaseModel):
    """Log output settings."""

    model_config = ConfigDict(extra="forbid")

    level: str = "INFO"


class ConfigData(BaseModel):
    """Root configuration, read from the `config:` key of config.yaml."""

    model_config = ConfigDict(extra="forbid")

    app_name: str = DEFAULT_CONSTANTS.DEFAULT_APP_NAME
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    manifests: ManifestsConfig = Field(default_factory=ManifestsConfig)
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    rollout: RolloutConfig = Field(default_factory=RolloutConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
