"""Shared pytest fixtures for ninja-to-soong tests."""

import os

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Tests never inherit N2S_* settings from the calling shell."""
    for key in list(os.environ):
        if key.startswith("N2S_"):
            monkeypatch.delenv(key)
