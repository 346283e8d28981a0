import sys
import pytest
from pathlib import Path
from datetime import datetime, timedelta, timezone

from flashdeck.models import Card, Deck
from flashdeck.storage import DeckStorage

UTC = timezone.utc


# each test runs on cwd to its temp dir
@pytest.fixture(autouse=True)
def go_to_tmpdir(request):
    """
    Temporarily change the process working directory to the test's tmpdir and
    prepend that tmpdir to sys.path.
    """
    tmpdir = request.getfixturevalue("tmpdir")
    sys.path.insert(0, str(tmpdir))
    with tmpdir.as_cwd():
        yield


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path):
    """Keep settings and user config out of the real home directory."""
    monkeypatch.delenv("FLASHDECK_DECKS_DIR", raising=False)
    monkeypatch.setenv("FLASHDECK_CONFIG_PATH", str(tmp_path / "config" / "config.yaml"))


# --- Storage Fixtures ---
@pytest.fixture
def decks_dir(tmp_path: Path) -> Path:
    return tmp_path / "decks"


@pytest.fixture
def storage(decks_dir: Path) -> DeckStorage:
    """A fresh store. Construction installs the bundled starter deck."""
    return DeckStorage(decks_dir)


@pytest.fixture
def empty_storage(decks_dir: Path) -> DeckStorage:
    """A store holding no decks at all, bundled deck removed."""
    store = DeckStorage(decks_dir)
    for info in store.list_decks():
        store.delete_deck(info.id)
    return store


# --- Model Fixtures ---
@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def sample_deck(fixed_now: datetime) -> Deck:
    """
    A three-card deck: one new card, one in review due yesterday, and one
    mature card not yet due.
    """
    return Deck(
        id="sample01",
        name="Spanish",
        description="Basic vocabulary",
        cards=[
            Card(id="c-new", front="Hola", back="Hello"),
            Card(
                id="c-due",
                front="Gato",
                back="Cat",
                interval=6,
                repetitions=2,
                ease_factor=2.36,
                total_reviews=3,
                lapses=1,
                tags=["animals"],
                due_date=fixed_now - timedelta(days=1),
                last_reviewed=fixed_now - timedelta(days=7),
            ),
            Card(
                id="c-mature",
                front="Perro",
                back="Dog",
                interval=30,
                repetitions=5,
                ease_factor=2.7,
                total_reviews=5,
                due_date=fixed_now + timedelta(days=10),
                last_reviewed=fixed_now - timedelta(days=20),
            ),
        ],
    )
