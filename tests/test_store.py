"""Tests for the JSON array file store."""

from __future__ import annotations

import json
import logging

import pytest

from portfolio_api.store import RecordStore, StoreInitError, StoreWriteError


def test_initialize_creates_empty_array(tmp_path) -> None:
    path = tmp_path / "portfolios.json"
    RecordStore(path).initialize()

    assert path.read_text(encoding="utf-8") == "[]"


def test_initialize_creates_missing_directories(tmp_path) -> None:
    path = tmp_path / "nested" / "dir" / "portfolios.json"
    RecordStore(path).initialize()

    assert json.loads(path.read_text(encoding="utf-8")) == []


def test_initialize_keeps_existing_file(tmp_path) -> None:
    path = tmp_path / "portfolios.json"
    path.write_text('[{"id": "keep-me"}]', encoding="utf-8")

    store = RecordStore(path)
    store.initialize()

    assert store.load_all() == [{"id": "keep-me"}]


def test_initialize_failure_raises(tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(StoreInitError):
        RecordStore(blocker / "portfolios.json").initialize()


def test_load_all_missing_file_is_empty(tmp_path, caplog: pytest.LogCaptureFixture) -> None:
    store = RecordStore(tmp_path / "absent.json")
    with caplog.at_level(logging.ERROR, logger="portfolio"):
        assert store.load_all() == []
    assert "Error reading portfolios" in caplog.text


@pytest.mark.parametrize("content", ["{not json", '{"id": "x"}', ""])
def test_load_all_unreadable_content_is_empty(tmp_path, content: str) -> None:
    path = tmp_path / "portfolios.json"
    path.write_text(content, encoding="utf-8")

    assert RecordStore(path).load_all() == []


def test_save_all_writes_pretty_printed_array(tmp_path) -> None:
    path = tmp_path / "portfolios.json"
    store = RecordStore(path)
    records = [{"id": "a", "title": "Café"}, {"id": "b"}]

    store.save_all(records)

    text = path.read_text(encoding="utf-8")
    assert text == json.dumps(records, ensure_ascii=False, indent=2)
    assert '\n  {\n    "id": "a",' in text
    assert store.load_all() == records


def test_save_all_failure_raises(tmp_path) -> None:
    # a directory cannot be opened for writing
    store = RecordStore(tmp_path)

    with pytest.raises(StoreWriteError) as exc_info:
        store.save_all([])
    assert isinstance(exc_info.value.__cause__, OSError)


def test_save_all_unserializable_leaves_file_intact(tmp_path) -> None:
    path = tmp_path / "portfolios.json"
    store = RecordStore(path)
    store.save_all([{"id": "a"}])

    with pytest.raises(StoreWriteError):
        store.save_all([{"id": "b", "bad": object()}])

    assert store.load_all() == [{"id": "a"}]


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_save_all_rejects_non_standard_floats(tmp_path, value: float) -> None:
    path = tmp_path / "portfolios.json"
    store = RecordStore(path)
    store.save_all([{"id": "a"}])

    with pytest.raises(StoreWriteError):
        store.save_all([{"id": "a"}, {"id": "b", "x": value}])

    assert json.loads(path.read_text(encoding="utf-8")) == [{"id": "a"}]


def test_store_shares_the_service_logger() -> None:
    import portfolio_api.main  # noqa: F401
    import portfolio_api.store as store_mod

    assert store_mod.log is logging.getLogger("portfolio")
    assert len(store_mod.log.handlers) == 1
