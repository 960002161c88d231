"""Base Pydantic models and loader settings.

This module defines the foundational model classes used by declarative
directive definitions, together with the environment-driven settings
consumed by the document loader.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

#: Environment prefix for loader settings.
SETTINGS_PREFIX = 'YAML_DIRECTIVES_'


class SchemaModel(BaseModel):
    """Base immutable model for declarative definitions.

    Design principles enforced by this model:
        - Immutability: definitions cannot be modified after creation,
          so a registered directive behaves the same for every load.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos in plugin definitions.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Unknown environment variables are ignored, so the surrounding
    environment may contain unrelated values.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )


class LoaderSettings(SettingsModel):
    """Document loader defaults resolved from the environment.

    Every field may be set through a `YAML_DIRECTIVES_<FIELD>` variable.
    Arguments passed explicitly to `DocumentLoader` take precedence.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
        env_prefix=SETTINGS_PREFIX,
    )

    max_depth: int = Field(
        default=64,
        ge=1,
        title='Maximum fragment depth',
        description=(
            'Maximum number of nested fragments (includes, environment and '
            'variable lookups) composed while resolving a single document.'
        ),
    )

    strict: bool = Field(
        default=False,
        title='Strict plugin mode',
        description='Raise on plugin loading issues instead of warning.',
    )

    plugins: bool = Field(
        default=True,
        title='Load plugins',
        description='Discover directives from installed entry points.',
    )
