"""Shared pytest fixtures for the blockjava test suite."""

from __future__ import annotations

import pytest

from blockjava.config import GeneratorConfig


@pytest.fixture
def config():
    return GeneratorConfig(app_name="Robot", package="com.example")
