"""Tests for timeline_sdk.core.persistence — autosave adapters."""

import logging

from timeline_sdk.core.persistence import AUTOSAVE_KEY, FilePersistence, MemoryPersistence
from timeline_sdk.core.slides import default_project


class TestFilePersistence:
    def test_path(self, tmp_path):
        store = FilePersistence(root_path=tmp_path)
        assert store.path == tmp_path / f"{AUTOSAVE_KEY}.json"

    def test_load_missing(self, tmp_path):
        assert FilePersistence(root_path=tmp_path).load() is None

    def test_roundtrip(self, tmp_path):
        store = FilePersistence(root_path=tmp_path / "nested")
        project = default_project()
        store.save(project)
        assert store.path.exists()
        assert store.load() == project

    def test_corrupt_file_ignored(self, tmp_path, caplog):
        store = FilePersistence(root_path=tmp_path)
        store.path.write_text("{broken", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="SlideTimeline.core.persistence"):
            assert store.load() is None
        assert "unreadable autosave" in caplog.text

    def test_custom_key(self, tmp_path):
        store = FilePersistence(root_path=tmp_path, key="other")
        store.save(default_project())
        assert (tmp_path / "other.json").exists()


class TestMemoryPersistence:
    def test_empty(self):
        assert MemoryPersistence().load() is None

    def test_roundtrip(self):
        store = MemoryPersistence()
        project = default_project()
        store.save(project)
        assert AUTOSAVE_KEY in store.store
        assert store.load() == project

    def test_invalid_document_ignored(self):
        store = MemoryPersistence(store={AUTOSAVE_KEY: '{"nope": 1}'})
        assert store.load() is None
