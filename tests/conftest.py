"""Shared pytest fixtures for all tests."""

import pytest

from cli.config import Config
from vault.services.storage_service import StorageService

MAX_CHUNK = 1_000_000
MAX_OBJECT = 5_000_000


@pytest.fixture
def service():
    """
    Empty storage service with a 1,000,000-byte chunk limit and a
    5,000,000-byte object limit.
    """
    return StorageService(max_object_size=MAX_OBJECT, max_chunk_size=MAX_CHUNK)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary CLI config directory.
    """
    config_dir = tmp_path / '.vault'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Config instance backed by a temp file, with a caller id set.
    """
    config = Config(temp_config_dir / 'config.json')
    config.data['caller_id'] = 'alice'
    return config


@pytest.fixture
def sample_file(tmp_path):
    """
    A 2,500-byte local file with distinct bytes per position.
    """
    file_path = tmp_path / 'sample.bin'
    file_path.write_bytes(bytes(i % 251 for i in range(2500)))
    return file_path
