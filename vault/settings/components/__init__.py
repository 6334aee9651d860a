"""Shared helpers for settings components."""

from pathlib import Path

from decouple import AutoConfig

# Project root: the directory holding the ``vault`` package
BASE_DIR = Path(__file__).parent.parent.parent.parent

# Reads values from environment variables or ``BASE_DIR/.env``
config = AutoConfig(search_path=BASE_DIR)
