"""Decoder configuration management for crdsatools.

This module provides the receiver configuration model and a module-level
configuration context used as a fallback when no explicit configuration is
passed to a receiver, oracle or decode policy.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DecoderConfig(BaseModel):
    """Configuration of a random-access (CRDSA/Marsala) frame receiver.

    Holds the frame geometry, the decode policy, the link-performance error
    model and the interference elimination model.
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    # Frame geometry
    num_slots: int = Field(100, gt=0, description="Slots per random-access frame")
    max_replicas: int = Field(3, ge=1, description="Maximum replicas per packet")

    # Decoding
    decode_policy: Literal["crdsa", "marsala"] = Field(
        "marsala", description="Plain SIC or SIC followed by correlation"
    )
    strict_validation: bool = Field(
        False, description="Check replica consistency of the whole frame before decoding"
    )

    # Link-performance error model
    error_model: Literal["threshold", "constant", "link_results", "none"] = Field(
        "threshold", description="Decision model of the link-performance oracle"
    )
    sinr_threshold_db: float = Field(
        3.0, description="Decoding threshold in dB for the threshold model"
    )
    constant_error_rate: float = Field(
        0.0, ge=0, le=1, description="Packet error rate for the constant model"
    )
    link_results_path: Optional[str] = Field(
        None, description="Link results file or directory of <modcod>.txt files"
    )
    seed: Optional[int] = Field(None, description="Seed of random error models")

    # Interference elimination
    elimination_model: Literal["perfect", "residual"] = Field(
        "perfect", description="Interference cancellation model"
    )
    residual_factor: float = Field(
        0.0, ge=0, le=1, description="Fraction of power left after cancellation"
    )

    # Extensibility for custom parameters
    extra: Dict[str, Any] = Field(
        default_factory=dict, description="Custom user-defined parameters"
    )

    @model_validator(mode="after")
    def check_error_model_inputs(self) -> "DecoderConfig":
        """Link results decoding needs a table to read from."""
        if self.error_model == "link_results" and not self.link_results_path:
            raise ValueError("error_model 'link_results' requires link_results_path")
        return self

    @classmethod
    def from_yaml(cls, path: str) -> "DecoderConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            DecoderConfig instance
        """
        import yaml

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        extra = data.pop("extra", {})
        config = cls(**data)
        config.extra.update(extra)
        return config

    def to_yaml(self, path: str):
        """Save configuration to YAML file.

        Args:
            path: Path where YAML file will be saved
        """
        import yaml

        data = self.model_dump()

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a parameter value, checking extra dict if not in main fields."""
        if key in type(self).model_fields:
            return getattr(self, key)
        return self.extra.get(key, default)

    def set(self, key: str, value: Any):
        """Set a parameter value, using extra dict for custom parameters."""
        if key in type(self).model_fields:
            setattr(self, key, value)
        else:
            self.extra[key] = value


# ============================================================================
# Global Configuration Context
# ============================================================================

_global_config: Optional[DecoderConfig] = None


def set_config(config: DecoderConfig):
    """Set the global decoder configuration."""
    global _global_config
    _global_config = config


def get_config() -> Optional[DecoderConfig]:
    """Get the current global decoder configuration, or None if not set."""
    return _global_config


def clear_config():
    """Clear the global configuration."""
    global _global_config
    _global_config = None


def require_config() -> DecoderConfig:
    """Get the current config, raising an error if not set.

    Returns:
        Current DecoderConfig instance

    Raises:
        RuntimeError: If no config is currently set
    """
    config = get_config()
    if config is None:
        raise RuntimeError(
            "No decoder configuration is set. Please call set_config(config) first."
        )
    return config


def resolve_config(config: Optional[DecoderConfig] = None) -> DecoderConfig:
    """Explicit config first, then the global one, then defaults."""
    if config is not None:
        return config
    return get_config() or DecoderConfig()


@contextmanager
def using_config(config: DecoderConfig) -> Iterator[DecoderConfig]:
    """Temporarily install ``config`` as the global configuration."""
    previous = get_config()
    set_config(config)
    try:
        yield config
    finally:
        if previous is None:
            clear_config()
        else:
            set_config(previous)
