"""Tests for the DecoderConfig functionality."""

import pytest
from pydantic import ValidationError

from crdsatools import (
    DecoderConfig,
    RandomAccessReceiver,
    ThresholdOracle,
    clear_config,
    get_config,
    make_oracle,
    require_config,
    set_config,
    using_config,
)


class TestDecoderConfig:
    """Test DecoderConfig creation and validation."""

    def test_defaults(self):
        config = DecoderConfig()

        assert config.num_slots == 100
        assert config.max_replicas == 3
        assert config.decode_policy == "marsala"
        assert config.error_model == "threshold"
        assert config.elimination_model == "perfect"
        assert config.strict_validation is False

    def test_invalid_num_slots(self):
        with pytest.raises(ValidationError):
            DecoderConfig(num_slots=0)

    def test_invalid_policy(self):
        with pytest.raises(ValidationError):
            DecoderConfig(decode_policy="irsa")

    def test_invalid_assignment(self):
        """Assignments are validated too."""
        config = DecoderConfig()

        with pytest.raises(ValidationError):
            config.residual_factor = 2.0

    def test_link_results_requires_path(self):
        with pytest.raises(ValidationError, match="link_results_path"):
            DecoderConfig(error_model="link_results")

    def test_extra_params(self):
        config = DecoderConfig(extra={"carrier": "RCS2-1", "beam": 12})

        assert config.get("beam") == 12
        assert config.get("num_slots") == 100
        assert config.get("nonexistent", "default") == "default"

    def test_set_and_get(self):
        config = DecoderConfig()
        config.set("sinr_threshold_db", 5.0)
        config.set("my_param", 123)

        assert config.sinr_threshold_db == 5.0
        assert config.get("my_param") == 123


class TestGlobalConfigContext:
    """Test global config context management."""

    def test_set_and_get_config(self):
        config = DecoderConfig(num_slots=64)
        set_config(config)

        assert get_config() is config

    def test_get_config_none_when_not_set(self):
        assert get_config() is None

    def test_require_config_raises_when_not_set(self):
        with pytest.raises(RuntimeError, match="No decoder configuration is set"):
            require_config()

    def test_require_config_returns_when_set(self):
        config = DecoderConfig()
        set_config(config)

        assert require_config() is config

    def test_clear_config(self):
        set_config(DecoderConfig())
        clear_config()

        assert get_config() is None

    def test_using_config_restores_previous(self):
        outer = DecoderConfig(num_slots=10)
        inner = DecoderConfig(num_slots=20)
        set_config(outer)

        with using_config(inner) as active:
            assert active is inner
            assert get_config() is inner

        assert get_config() is outer

    def test_using_config_without_previous(self):
        with using_config(DecoderConfig()):
            assert get_config() is not None

        assert get_config() is None

    def test_receiver_picks_up_global_config(self):
        set_config(DecoderConfig(num_slots=12, decode_policy="crdsa", sinr_threshold_db=7.0))

        rx = RandomAccessReceiver()

        assert rx.config.num_slots == 12
        assert rx.policy.name == "crdsa"
        assert rx.policy.oracle.threshold_db == 7.0

    def test_explicit_config_wins(self):
        set_config(DecoderConfig(sinr_threshold_db=7.0))

        oracle = make_oracle(DecoderConfig(sinr_threshold_db=1.0))

        assert isinstance(oracle, ThresholdOracle)
        assert oracle.threshold_db == 1.0


class TestConfigSaveLoad:
    """Test config save/load functionality."""

    def test_save_and_load_yaml(self, tmp_path):
        config = DecoderConfig(
            num_slots=64,
            max_replicas=2,
            decode_policy="crdsa",
            error_model="constant",
            constant_error_rate=0.05,
            seed=3,
            elimination_model="residual",
            residual_factor=0.1,
            extra={"beam": 4},
        )

        config_file = tmp_path / "decoder.yaml"
        config.to_yaml(str(config_file))
        loaded = DecoderConfig.from_yaml(str(config_file))

        assert loaded.model_dump() == config.model_dump()

    def test_load_partial_yaml(self, tmp_path):
        config_file = tmp_path / "partial.yaml"
        config_file.write_text("num_slots: 32\nsinr_threshold_db: 1.5\n")

        loaded = DecoderConfig.from_yaml(str(config_file))

        assert loaded.num_slots == 32
        assert loaded.sinr_threshold_db == 1.5
        assert loaded.decode_policy == "marsala"
