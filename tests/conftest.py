"""Shared test fixtures and configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from infrastructure.object_stores.local_object_store import LocalObjectStore, LocalStorageConfig

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def storage_config(tmp_path: Path) -> LocalStorageConfig:
    """Return a storage config rooted in a per-test temporary directory."""
    storage_dir = tmp_path / "storage"
    return LocalStorageConfig(
        storage_dir=storage_dir,
        public_dir=storage_dir / "public",
        base_url="/storage",
    )


@pytest.fixture
def object_store(storage_config: LocalStorageConfig) -> LocalObjectStore:
    """Create a LocalObjectStore over the temporary storage root."""
    return LocalObjectStore(storage_config)


@pytest.fixture
def sample_png_bytes() -> bytes:
    """Return a small buffer starting with the PNG signature."""
    return b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4
