"""Classifier configuration models and environment-driven settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from runetree.logging import LogLevel

type MeasureName = Literal["entropy", "gini"]


class DecisionTreeConfig(BaseModel):
    """Validated hyperparameters for `DecisionTreeClassifier`.

    Attributes:
        max_depth (int): Number of split levels allowed below the root. `0`
            produces a single leaf.
        min_size (int): A node with this many rows or fewer becomes a leaf.

    Examples:
        >>> DecisionTreeConfig(max_depth=4, min_size=3).max_depth
        4
    """

    model_config = ConfigDict(frozen=True)

    max_depth: int = Field(
        ge=0,
        description="Number of split levels allowed below the root; 0 produces a single leaf.",
    )
    min_size: int = Field(
        ge=1,
        description="Nodes holding this many rows or fewer are turned into leaves.",
    )


class TreeSettings(BaseSettings):
    """Default classifier settings read from `RUNETREE_*` environment variables.

    Attributes:
        max_depth (int): Default `max_depth`.
        min_size (int): Default `min_size`.
        measure (MeasureName): Selection measure used by the greedy selector.
        log_level (LogLevel): Level passed to `enable_logging` by scripts.
    """

    model_config = SettingsConfigDict(
        env_prefix="RUNETREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_depth: int = Field(default=4, ge=0, description="Default number of split levels below the root.")
    min_size: int = Field(default=3, ge=1, description="Default minimum node size required to keep splitting.")
    measure: MeasureName = Field(default="entropy", description="Selection measure used to score candidate splits.")
    log_level: LogLevel = Field(default="INFO", description="Log level used when scripts enable logging.")

    def to_config(self) -> DecisionTreeConfig:
        """Return the hyperparameter subset as a `DecisionTreeConfig`.

        Returns:
            DecisionTreeConfig: Validated `max_depth` and `min_size`.
        """
        return DecisionTreeConfig(max_depth=self.max_depth, min_size=self.min_size)
