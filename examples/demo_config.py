"""Demonstration of the global DecoderConfig pattern.

This example shows four usage patterns:
1. Explicit config passed to every receiver
2. Global config - set once, used by every receiver, oracle and policy
3. Temporary config with a context manager
4. Save/load config to YAML for reproducible simulations
"""

from crdsatools import (
    DecoderConfig,
    RandomAccessReceiver,
    clear_config,
    get_config,
    make_oracle,
    set_config,
    using_config,
)
from crdsatools.traffic import random_crdsa_frame


def _frame(load=0.7, num_slots=100, seed=0):
    return random_crdsa_frame(
        num_packets=int(load * num_slots),
        num_slots=num_slots,
        snr_db=10.0,
        power_spread_db=6.0,
        seed=seed,
    )


def demo_explicit_config():
    """Pattern 1: Explicit config for each receiver"""
    print("\n" + "=" * 70)
    print("PATTERN 1: Explicit Config")
    print("=" * 70)

    for policy in ("crdsa", "marsala"):
        rx = RandomAccessReceiver(DecoderConfig(num_slots=100, decode_policy=policy))
        result = rx.decode_frame(_frame())
        print(
            f"{policy:8s}: {result.statistics.decoded}/{result.statistics.packets_received} "
            f"packets decoded"
        )


def demo_global_config():
    """Pattern 2: Global config - set once, use everywhere"""
    print("\n" + "=" * 70)
    print("PATTERN 2: Global Config")
    print("=" * 70)

    config = DecoderConfig(
        # Frame geometry
        num_slots=100,
        max_replicas=3,
        # Decoding
        decode_policy="marsala",
        # Link oracle: lose 5% of the bursts whatever their SINR
        error_model="constant",
        constant_error_rate=0.05,
        seed=1,
        # Imperfect cancellation
        elimination_model="residual",
        residual_factor=0.02,
    )
    set_config(config)
    print(f"Config set globally: {config.decode_policy}, {config.error_model} errors")

    # No config argument: everything is taken from the global one
    oracle = make_oracle()
    print(f"  Oracle from config: {type(oracle).__name__}")

    rx = RandomAccessReceiver()
    result = rx.decode_frame(_frame())
    print(f"  Decoded {result.statistics.decoded} packets "
          f"({result.statistics.decoded_correlation} by correlation)")

    clear_config()
    print(f"Config cleared: get_config() -> {get_config()}")


def demo_temporary_config():
    """Pattern 3: Temporary config using context manager"""
    print("\n" + "=" * 70)
    print("PATTERN 3: Temporary Config with Context Manager")
    print("=" * 70)

    set_config(DecoderConfig(num_slots=100, sinr_threshold_db=3.0))
    print(f"Default threshold: {get_config().sinr_threshold_db} dB")

    with using_config(DecoderConfig(num_slots=100, sinr_threshold_db=6.0)):
        result = RandomAccessReceiver().decode_frame(_frame())
        print(f"  Inside context (6 dB): {result.statistics.decoded} decoded")

    result = RandomAccessReceiver().decode_frame(_frame())
    print(f"After context ({get_config().sinr_threshold_db} dB): "
          f"{result.statistics.decoded} decoded")
    clear_config()


def demo_save_load_config():
    """Pattern 4: Save and load configurations"""
    print("\n" + "=" * 70)
    print("PATTERN 4: Save/Load Config for Reproducibility")
    print("=" * 70)

    config = DecoderConfig(
        num_slots=64,
        decode_policy="crdsa",
        sinr_threshold_db=2.5,
        extra={"carrier": "return-1", "beam": 7},
    )

    config_file = "/tmp/my_decoder_config.yaml"
    config.to_yaml(config_file)
    print(f"Saved config to: {config_file}")

    loaded_config = DecoderConfig.from_yaml(config_file)
    print("Loaded config from file:")
    print(f"  Slots: {loaded_config.num_slots}")
    print(f"  Policy: {loaded_config.decode_policy}")
    print(f"  Beam: {loaded_config.get('beam')}")


if __name__ == "__main__":
    demo_explicit_config()
    demo_global_config()
    demo_temporary_config()
    demo_save_load_config()
