"""Tests for the filesystem-backed object store."""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import pytest

from domain.exceptions import ObjectNotFoundError
from domain.value_objects.acl_policy import AclPolicy
from domain.value_objects.object_permission import ObjectPermission
from domain.value_objects.visibility import Visibility
from infrastructure.config import Settings
from infrastructure.object_stores.local_object_store import LocalObjectStore, LocalStorageConfig

UUID_PATTERN = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"


def _all_files(root: Path) -> list[Path]:
    return [p for p in root.rglob("*") if p.is_file()]


class TestLocalStorageConfig:
    def test_from_settings_defaults_public_dir(self, tmp_path: Path) -> None:
        settings = Settings(LOCAL_STORAGE_DIR=str(tmp_path / "data"))
        config = LocalStorageConfig.from_settings(settings)

        assert config.storage_dir == tmp_path / "data"
        assert config.public_dir == tmp_path / "data" / "public"
        assert config.base_url == "/storage"

    def test_from_settings_uses_explicit_values(self, tmp_path: Path) -> None:
        settings = Settings(
            LOCAL_STORAGE_DIR=str(tmp_path / "data"),
            PUBLIC_STORAGE_DIR=str(tmp_path / "www"),
            STORAGE_BASE_URL="/files/",
        )
        config = LocalStorageConfig.from_settings(settings)

        assert config.public_dir == tmp_path / "www"
        assert config.base_url == "/files"

    def test_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOCAL_STORAGE_DIR", str(tmp_path / "env-storage"))
        monkeypatch.setenv("STORAGE_BASE_URL", "/media")
        config = LocalStorageConfig.from_settings(Settings())

        assert config.storage_dir == tmp_path / "env-storage"
        assert config.base_url == "/media"


class TestEnsureDirectories:
    def test_constructor_creates_all_directories(self, storage_config: LocalStorageConfig) -> None:
        LocalObjectStore(storage_config)

        assert storage_config.storage_dir.is_dir()
        assert storage_config.public_dir.is_dir()
        assert (storage_config.storage_dir / "uploads").is_dir()
        assert (storage_config.storage_dir / "private").is_dir()

    def test_is_idempotent(self, object_store: LocalObjectStore) -> None:
        root = object_store.config.storage_dir
        before = sorted(p.relative_to(root) for p in root.rglob("*"))

        object_store.ensure_directories()
        object_store.ensure_directories()

        assert sorted(p.relative_to(root) for p in root.rglob("*")) == before

    def test_recreates_removed_directory(self, object_store: LocalObjectStore) -> None:
        uploads = object_store.config.uploads_dir
        uploads.rmdir()

        object_store.ensure_directories()

        assert uploads.is_dir()

    def test_unwritable_root_does_not_raise(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_bytes(b"")
        config = LocalStorageConfig(storage_dir=blocker / "storage", public_dir=blocker / "pub")

        store = LocalObjectStore(config)

        assert not (blocker / "storage").exists()
        with pytest.raises(OSError):
            store.save_uploaded_file(b"data", "a.txt", "user-1", Visibility.PUBLIC)


class TestUploadUrl:
    def test_handles_are_distinct_and_allocate_nothing(
        self,
        object_store: LocalObjectStore,
    ) -> None:
        first = object_store.get_upload_url()
        second = object_store.get_upload_url()

        assert first != second
        for url in (first, second):
            parts = urlsplit(url)
            assert parts.path == "/api/upload/direct"
            upload_id = parse_qs(parts.query)["uploadId"][0]
            assert re.fullmatch(UUID_PATTERN, upload_id)
            assert not any(upload_id in str(p) for p in object_store.config.storage_dir.rglob("*"))

        assert _all_files(object_store.config.storage_dir) == []

    def test_bucket_and_prefix_are_encoded(self, object_store: LocalObjectStore) -> None:
        url = object_store.get_upload_url(bucket="listings", prefix="a b/c&d")
        query = parse_qs(urlsplit(url).query)

        assert query["bucket"] == ["listings"]
        assert query["prefix"] == ["a b/c&d"]


class TestSaveAndResolve:
    def test_public_round_trip(self, object_store: LocalObjectStore, sample_png_bytes: bytes) -> None:
        url = object_store.save_uploaded_file(sample_png_bytes, "house.png", "user-1")

        assert re.fullmatch(rf"/storage/public/{UUID_PATTERN}\.png", url)
        found = object_store.get_object_file(url)
        assert found.path.read_bytes() == sample_png_bytes
        assert found.size == len(sample_png_bytes)
        assert found.content_type == "image/png"
        assert found.path.parent == object_store.config.public_dir

    def test_private_round_trip(self, object_store: LocalObjectStore) -> None:
        data = b"%PDF-1.7 sale deed"
        url = object_store.save_uploaded_file(data, "deed.pdf", "user-7", Visibility.PRIVATE)

        assert re.fullmatch(rf"/storage/private/user-7/{UUID_PATTERN}\.pdf", url)
        found = object_store.get_object_file(url)
        assert found.path.read_bytes() == data
        assert found.content_type == "application/pdf"
        assert found.path.parent == object_store.config.private_dir / "user-7"

    def test_uppercase_extension_is_kept_and_not_matched(
        self,
        object_store: LocalObjectStore,
    ) -> None:
        data = bytes(1024)
        url = object_store.save_uploaded_file(data, "photo.PNG", "user-42", Visibility.PRIVATE)

        assert re.fullmatch(rf"/storage/private/user-42/{UUID_PATTERN}\.PNG", url)
        found = object_store.get_object_file(url)
        assert found.size == 1024
        assert found.content_type == "application/octet-stream"

    @pytest.mark.parametrize("name", [None, "", "README", ".env"])
    def test_missing_extension_defaults_to_bin(
        self,
        object_store: LocalObjectStore,
        name: str | None,
    ) -> None:
        url = object_store.save_uploaded_file(b"\xff\xd8\xff", name, "user-1")

        assert url.endswith(".bin")
        assert object_store.get_object_file(url).content_type == "application/octet-stream"

    def test_bytes_are_written_verbatim(self, object_store: LocalObjectStore) -> None:
        data = bytes(range(256)) * 3
        url = object_store.save_uploaded_file(data, "blob.json", "user-1")

        assert object_store.get_object_file(url).path.read_bytes() == data

    def test_resolves_without_base_url(self, object_store: LocalObjectStore) -> None:
        url = object_store.save_uploaded_file(b"hello", "a.txt", "user-1")
        relative = url.removeprefix("/storage")

        assert object_store.get_object_file(relative).size == 5
        assert object_store.get_object_file(relative.lstrip("/")).content_type == "text/plain"

    def test_saves_are_independent(self, object_store: LocalObjectStore) -> None:
        urls = {object_store.save_uploaded_file(b"x", "a.gif", "user-1") for _ in range(20)}

        assert len(urls) == 20
        assert len(_all_files(object_store.config.public_dir)) == 20

    def test_bucket_and_prefix_nest_the_object(self, object_store: LocalObjectStore) -> None:
        url = object_store.save_uploaded_file(
            b"plan",
            "floor.webp",
            "user-3",
            Visibility.PRIVATE,
            bucket="listings",
            prefix="/2024/flat-12/",
        )

        assert re.fullmatch(
            rf"/storage/private/user-3/listings/2024/flat-12/{UUID_PATTERN}\.webp",
            url,
        )
        found = object_store.get_object_file(url)
        assert found.path.parent == object_store.config.private_dir.joinpath(
            "user-3",
            "listings",
            "2024",
            "flat-12",
        )
        assert found.content_type == "image/webp"

    def test_custom_base_url_and_public_dir(self, tmp_path: Path) -> None:
        config = LocalStorageConfig(
            storage_dir=tmp_path / "data",
            public_dir=tmp_path / "www",
            base_url="/media",
        )
        store = LocalObjectStore(config)

        url = store.save_uploaded_file(b"{}", "a.json", "user-1")

        assert url.startswith("/media/public/")
        assert store.get_object_file(url).path.parent == tmp_path / "www"

    def test_independent_stores_do_not_share_state(self, tmp_path: Path) -> None:
        first = LocalObjectStore(LocalStorageConfig(tmp_path / "a", tmp_path / "a" / "public"))
        second = LocalObjectStore(LocalStorageConfig(tmp_path / "b", tmp_path / "b" / "public"))

        url = first.save_uploaded_file(b"only-in-a", "a.txt", "user-1")

        assert first.get_object_file(url).size == 9
        with pytest.raises(ObjectNotFoundError):
            second.get_object_file(url)


class TestVisibilityPartitioning:
    def test_private_object_needs_owner_segment(self, object_store: LocalObjectStore) -> None:
        url = object_store.save_uploaded_file(b"secret", "id.pdf", "user-9", Visibility.PRIVATE)
        file_name = url.rsplit("/", 1)[1]

        with pytest.raises(ObjectNotFoundError):
            object_store.get_object_file(f"/storage/private/{file_name}")
        with pytest.raises(ObjectNotFoundError):
            object_store.get_object_file(f"/storage/public/{file_name}")
        with pytest.raises(ObjectNotFoundError):
            object_store.get_object_file(f"/storage/private/user-8/{file_name}")
        assert object_store.search_public_object(file_name) is None

    def test_public_object_is_not_under_private(self, object_store: LocalObjectStore) -> None:
        url = object_store.save_uploaded_file(b"brochure", "b.pdf", "user-9")
        file_name = url.rsplit("/", 1)[1]

        with pytest.raises(ObjectNotFoundError):
            object_store.get_object_file(f"/storage/private/user-9/{file_name}")
        assert not any(p.name == file_name for p in object_store.config.private_dir.rglob("*"))


class TestNotFound:
    @pytest.mark.parametrize(
        "path",
        [
            "/storage/public",
            "/storage/uploads/x.png",
            "/storage/public/missing.png",
            "/storage/private/user-1/missing.png",
        ],
    )
    def test_raises_not_found(self, object_store: LocalObjectStore, path: str) -> None:
        with pytest.raises(ObjectNotFoundError):
            object_store.get_object_file(path)

    def test_directory_is_not_an_object(self, object_store: LocalObjectStore) -> None:
        object_store.save_uploaded_file(b"x", "a.txt", "user-1", Visibility.PRIVATE)

        with pytest.raises(ObjectNotFoundError):
            object_store.get_object_file("/storage/private/user-1")

    def test_path_cannot_escape_visibility_root(self, object_store: LocalObjectStore) -> None:
        secret = object_store.config.storage_dir / "uploads" / "secret.txt"
        secret.write_bytes(b"scratch")

        with pytest.raises(ObjectNotFoundError):
            object_store.get_object_file("/storage/public/../uploads/secret.txt")
        assert object_store.search_public_object("../uploads/secret.txt") is None

    def test_nul_byte_path_is_not_found(self, object_store: LocalObjectStore) -> None:
        with pytest.raises(ObjectNotFoundError):
            object_store.get_object_file("/storage/public/a\x00b.png")
        with pytest.raises(ObjectNotFoundError):
            object_store.get_object_file("/storage/private/user-1/a\x00b.png")


class TestSearchPublicObject:
    def test_finds_existing_file(self, object_store: LocalObjectStore) -> None:
        url = object_store.save_uploaded_file(b"GIF89a", "logo.gif", "user-1")
        file_name = url.rsplit("/", 1)[1]

        found = object_store.search_public_object(file_name)

        assert found is not None
        assert found.size == 6
        assert found.content_type == "image/gif"

    def test_finds_nested_file(self, object_store: LocalObjectStore) -> None:
        nested = object_store.config.public_dir / "banners" / "hero.jpeg"
        nested.parent.mkdir(parents=True)
        nested.write_bytes(b"\xff\xd8")

        found = object_store.search_public_object("banners/hero.jpeg")

        assert found is not None
        assert found.content_type == "image/jpeg"

    def test_missing_file_returns_none(self, object_store: LocalObjectStore) -> None:
        assert object_store.search_public_object("nope.png") is None
        assert object_store.search_public_object("") is None

    def test_nul_byte_path_returns_none(self, object_store: LocalObjectStore) -> None:
        assert object_store.search_public_object("a\x00b.png") is None


class TestPolicyAndAccess:
    def test_open_object_reads_content(self, object_store: LocalObjectStore) -> None:
        url = object_store.save_uploaded_file(b"contents", "a.txt", "user-1")

        with object_store.open_object(object_store.get_object_file(url)) as stream:
            assert stream.read() == b"contents"

    def test_try_set_acl_policy_only_normalizes(self, object_store: LocalObjectStore) -> None:
        policy = AclPolicy(owner="user-1", visibility=Visibility.PRIVATE)

        assert object_store.try_set_acl_policy("x.png", policy) == "/storage/public/x.png"
        assert (
            object_store.try_set_acl_policy("https://h/storage/public/x.png", policy)
            == "/storage/public/x.png"
        )
        assert _all_files(object_store.config.storage_dir) == []

    @pytest.mark.parametrize("permission", list(ObjectPermission))
    def test_can_access_always_grants(
        self,
        object_store: LocalObjectStore,
        permission: ObjectPermission,
    ) -> None:
        url = object_store.save_uploaded_file(b"x", "a.txt", "owner", Visibility.PRIVATE)
        object_file = object_store.get_object_file(url)

        assert object_store.can_access(
            user_id="someone-else",
            object_file=object_file,
            requested_permission=permission,
        )
        assert object_store.can_access(user_id=None, object_file=object_file)
