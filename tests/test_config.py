"""Tests for configuration loading."""

import os

import pytest

from apiskel.config import EXTENSION_ENV, REFERENCE_PATH_ENV, ApiskelConfig


def test_defaults():
    config = ApiskelConfig()
    assert config.module_extension == ".yaml"
    assert config.reference_path == ""
    assert not config.fail_on_unresolved


def test_extension_gets_leading_dot():
    assert ApiskelConfig(module_extension="dll").module_extension == ".dll"


def test_from_env_and_overrides():
    os.environ[EXTENSION_ENV] = ".manifest"
    os.environ[REFERENCE_PATH_ENV] = "/opt/refs"
    try:
        config = ApiskelConfig.from_env()
        assert config.module_extension == ".manifest"
        assert config.reference_path == "/opt/refs"

        overridden = ApiskelConfig.from_env(reference_path="/elsewhere", module_extension=None)
        assert overridden.reference_path == "/elsewhere"
        assert overridden.module_extension == ".manifest"
    finally:
        del os.environ[EXTENSION_ENV]
        del os.environ[REFERENCE_PATH_ENV]


def test_from_env_rejects_unknown_options():
    with pytest.raises(TypeError):
        ApiskelConfig.from_env(colour="blue")
