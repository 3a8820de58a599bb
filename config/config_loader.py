import json
import os

from rich.console import Console

from simulator.renderer import DEFAULT_PALETTE
from simulator.transition_table import MAX_COUNT

DEFAULT_CONFIG_PATH = "config/runtime_config.json"

# Largest epoch / picture interval (u32)
MAX_STEP_COUNT = 2**32 - 1

DEFAULT_CONFIG = {
    "width": 512,
    "height": 512,
    "states": 4,
    "symbols": 6,
    "reset_steps": 2_500_000,
    "picture_steps": 10_000,
    "max_frames": 0,
    "seed": None,
    "fps": 24,
    "output_directory": "logs/",
    "log_file_prefix": "turing_"
}

# Expected types for validation
CONFIG_SCHEMA = {
    "width": int,
    "height": int,
    "states": int,
    "symbols": int,
    "reset_steps": int,
    "picture_steps": int,
    "max_frames": int,
    "seed": (int, type(None)),
    "fps": int,
    "output_directory": str,
    "log_file_prefix": str
}

# Inclusive bounds for integer keys
CONFIG_BOUNDS = {
    "width": (1, None),
    "height": (1, None),
    "states": (1, MAX_COUNT),
    "symbols": (1, min(MAX_COUNT, len(DEFAULT_PALETTE))),
    "reset_steps": (1, MAX_STEP_COUNT),
    "picture_steps": (1, MAX_STEP_COUNT),
    "max_frames": (0, None),
    "seed": (0, None),
    "fps": (1, None)
}

# stdout carries the video stream
console = Console(stderr=True)


def validate_config(config):
    for key, expected_type in CONFIG_SCHEMA.items():
        if key not in config:
            raise ValueError(f"Missing required configuration key: {key}")
        value = config[key]
        # bool is an int subclass, reject it explicitly
        if isinstance(value, bool) or not isinstance(value, expected_type):
            raise TypeError(f"Config key '{key}' expected {expected_type}, got {type(value)}.")

    for key, (low, high) in CONFIG_BOUNDS.items():
        value = config[key]
        if value is None:
            continue
        if value < low or (high is not None and value > high):
            upper = "" if high is None else f", at most {high}"
            raise ValueError(f"Config key '{key}' must be at least {low}{upper}, got {value}.")


def load_config(path=DEFAULT_CONFIG_PATH, quiet=False):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        user_config = json.load(f)

    # Merge defaults with overrides
    config = DEFAULT_CONFIG.copy()
    config.update(user_config)

    validate_config(config)

    if not quiet:
        console.print(f"[cyan]Loaded config from {path}:[/cyan]")
        for key, value in config.items():
            console.print(f"  {key}: {value}")

    return config


def save_config(config, path=DEFAULT_CONFIG_PATH):
    validate_config(config)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4)
