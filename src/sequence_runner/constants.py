"""
Centralized constants for Sequence Runner.

Defaults shared by the engine, the item loader and the configuration layer
live here to avoid duplication across modules.
"""

# Priority assumed for items that do not carry one (higher runs first)
DEFAULT_PRIORITY = 5

# Milliseconds to wait before the first item starts
DEFAULT_AUTO_START_DELAY = 0

# Config file names searched in the config dir and the working directory
CONFIG_FILE_NAMES = ("config.yaml", "seqr.yaml")

# Environment variables
ENV_CONFIG_DIR = "SEQR_CONFIG_DIR"
ENV_LOG_LEVEL = "SEQR_LOG_LEVEL"

# Built-in registry identifiers
DEFAULT_IMPLEMENTATION = "sequential"
DEFAULT_DELEGATE = "console"
