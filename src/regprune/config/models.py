"""Pydantic configuration models with code-baked defaults.

Sparse config contract: defaults baked here, the config file only
contains overrides.  A working setup needs only ``[registry] url``.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator

from regprune.domain.rules import NamedRetentionRule, RetentionRule


def _default_rule() -> RetentionRule:
    return RetentionRule(tags_to_keep=10, days_to_keep=0, keep_latest=True)


class RegistryConfig(BaseModel):
    """[registry] section."""

    model_config = {"frozen": True}

    url: str = Field(
        default="http://localhost:5000",
        validation_alias=AliasChoices("url", "URL"),
    )
    username: str | None = Field(
        default=None,
        validation_alias=AliasChoices("username", "Username"),
    )
    password: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("password", "Password"),
    )
    timeout: float = Field(default=30.0, gt=0)
    verify_tls: bool = False
    max_workers: int = Field(default=1, ge=1)

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class RetentionConfig(BaseModel):
    """[retention] section — the default rule plus ordered exceptions."""

    model_config = {"frozen": True}

    default: RetentionRule = Field(
        default_factory=_default_rule,
        validation_alias=AliasChoices("default", "Default"),
    )
    exceptions: tuple[NamedRetentionRule, ...] = Field(
        default=(),
        validation_alias=AliasChoices("exceptions", "Exceptions"),
    )

    @field_validator("exceptions", mode="before")
    @classmethod
    def _none_is_empty(cls, value: object) -> object:
        return () if value is None else value
