"""
Tests for whole-store JSON backups.
"""

import json
from datetime import datetime

import pytest

from flashdeck.exceptions import CorruptRecordError, RecordIOError
from flashdeck.interchange.backup import (
    default_backup_path,
    export_backup,
    import_backup,
    read_backup,
)
from flashdeck.models import Deck
from flashdeck.storage import DeckStorage


def test_export_writes_every_deck(storage, sample_deck, tmp_path):
    storage.save_deck(sample_deck)
    path = tmp_path / "backup.json"
    assert export_backup(storage, path) == 2

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["version"] == 1
    assert "created_at" in raw
    assert [d["name"] for d in raw["decks"]] == ["Development Workflow", "Spanish"]


def test_round_trip_into_empty_store(storage, sample_deck, tmp_path):
    storage.save_deck(sample_deck)
    path = tmp_path / "backup.json"
    export_backup(storage, path)

    target = DeckStorage(tmp_path / "restored")
    target.delete_deck("devflow1")
    assert import_backup(target, path) == (2, 0)
    assert target.load_deck("sample01") == sample_deck


def test_existing_ids_are_skipped(storage, sample_deck, tmp_path):
    storage.save_deck(sample_deck)
    path = tmp_path / "backup.json"
    export_backup(storage, path)

    sample_deck.name = "Changed locally"
    storage.save_deck(sample_deck)
    assert import_backup(storage, path) == (0, 2)
    assert storage.load_deck("sample01").name == "Changed locally"


def test_invalid_backup_leaves_store_unchanged(empty_storage, tmp_path):
    path = tmp_path / "backup.json"
    good = Deck(id="good0001", name="Good").model_dump(mode="json")
    path.write_text(
        json.dumps({"version": 1, "created_at": "2024-01-01T00:00:00Z",
                    "decks": [good, {"id": "bad"}]}),
        encoding="utf-8",
    )
    with pytest.raises(CorruptRecordError):
        import_backup(empty_storage, path)
    assert empty_storage.list_decks() == []


def test_not_json(empty_storage, tmp_path):
    path = tmp_path / "backup.json"
    path.write_text("not json", encoding="utf-8")
    with pytest.raises(CorruptRecordError):
        read_backup(path)


def test_missing_file(empty_storage, tmp_path):
    with pytest.raises(RecordIOError):
        import_backup(empty_storage, tmp_path / "missing.json")


def test_default_backup_path(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    now = datetime(2024, 5, 6, 7, 8, 9)
    assert default_backup_path(now) == tmp_path / "srl_backup_20240506_070809.json"

    (tmp_path / "Documents").mkdir()
    assert default_backup_path(now).parent == tmp_path / "Documents"


@pytest.mark.parametrize("deck_id", ["../outside", "nested/deck", "a.b", ""])
def test_deck_ids_must_be_plain_file_names(empty_storage, tmp_path, deck_id):
    path = tmp_path / "backup.json"
    deck = Deck(name="Escapee").model_dump(mode="json")
    deck["id"] = deck_id
    path.write_text(
        json.dumps({"version": 1, "created_at": "2024-01-01T00:00:00Z", "decks": [deck]}),
        encoding="utf-8",
    )
    with pytest.raises(CorruptRecordError):
        import_backup(empty_storage, path)
    assert not (tmp_path / "outside.json").exists()
    assert empty_storage.list_decks() == []
