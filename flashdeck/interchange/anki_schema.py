"""
Defines the Anki collection schema (schema version 11) as SQL string
constants, along with the archive entry names and field encodings that go
with it. Keeps the schema separate from the export and import logic.
"""

# Database entry names inside an .apkg archive, newest schema first.
COLLECTION_ENTRY_NAMES = ("collection.anki21", "collection.anki2")

# Entry name written on export. Matches SCHEMA_VERSION below.
EXPORT_COLLECTION_ENTRY = "collection.anki2"
MEDIA_ENTRY = "media"
EMPTY_MEDIA_MANIFEST = b"{}"

SCHEMA_VERSION = 11

# Separates the fields of a note inside notes.flds.
FIELD_SEPARATOR = "\x1f"

CHECKSUM_MODULUS = 2147483647

DEFAULT_DECK_ID = 1
DEFAULT_DECK_CONFIG_ID = 1
BASIC_MODEL_ID = 1000000000001
DECK_ID_STRIDE = 1000000000000

# Longest interval Anki schedules (deck config maxIvl).
MAX_INTERVAL_DAYS = 36500

# cards.type / cards.queue values
CARD_TYPE_NEW = 0
CARD_TYPE_LEARNING = 1
CARD_TYPE_REVIEW = 2

COLLECTION_SCHEMA_SQL = """
    CREATE TABLE col (
        id INTEGER PRIMARY KEY,
        crt INTEGER NOT NULL,
        mod INTEGER NOT NULL,
        scm INTEGER NOT NULL,
        ver INTEGER NOT NULL,
        dty INTEGER NOT NULL,
        usn INTEGER NOT NULL,
        ls INTEGER NOT NULL,
        conf TEXT NOT NULL,
        models TEXT NOT NULL,
        decks TEXT NOT NULL,
        dconf TEXT NOT NULL,
        tags TEXT NOT NULL
    );

    CREATE TABLE notes (
        id INTEGER PRIMARY KEY,
        guid TEXT NOT NULL,
        mid INTEGER NOT NULL,
        mod INTEGER NOT NULL,
        usn INTEGER NOT NULL,
        tags TEXT NOT NULL,
        flds TEXT NOT NULL,
        sfld TEXT NOT NULL,
        csum INTEGER NOT NULL,
        flags INTEGER NOT NULL,
        data TEXT NOT NULL
    );

    CREATE TABLE cards (
        id INTEGER PRIMARY KEY,
        nid INTEGER NOT NULL,
        did INTEGER NOT NULL,
        ord INTEGER NOT NULL,
        mod INTEGER NOT NULL,
        usn INTEGER NOT NULL,
        type INTEGER NOT NULL,
        queue INTEGER NOT NULL,
        due INTEGER NOT NULL,
        ivl INTEGER NOT NULL,
        factor INTEGER NOT NULL,
        reps INTEGER NOT NULL,
        lapses INTEGER NOT NULL,
        left INTEGER NOT NULL,
        odue INTEGER NOT NULL,
        odid INTEGER NOT NULL,
        flags INTEGER NOT NULL,
        data TEXT NOT NULL
    );

    CREATE TABLE revlog (
        id INTEGER PRIMARY KEY,
        cid INTEGER NOT NULL,
        usn INTEGER NOT NULL,
        ease INTEGER NOT NULL,
        ivl INTEGER NOT NULL,
        lastIvl INTEGER NOT NULL,
        factor INTEGER NOT NULL,
        time INTEGER NOT NULL,
        type INTEGER NOT NULL
    );

    CREATE TABLE graves (
        usn INTEGER NOT NULL,
        oid INTEGER NOT NULL,
        type INTEGER NOT NULL
    );
"""

# fmt: off
INSERT_COLLECTION_SQL = (
    "INSERT INTO col (id, crt, mod, scm, ver, dty, usn, ls, conf, models, decks, dconf, tags) "
    "VALUES (1, ?, ?, ?, ?, 0, -1, 0, '{}', ?, ?, ?, '{}')"
)

INSERT_NOTE_SQL = (
    "INSERT INTO notes (id, guid, mid, mod, usn, tags, flds, sfld, csum, flags, data) "
    "VALUES (?, ?, ?, ?, -1, ?, ?, ?, ?, 0, '')"
)

INSERT_CARD_SQL = (
    "INSERT INTO cards (id, nid, did, ord, mod, usn, type, queue, due, ivl, factor, reps, lapses, left, odue, odid, flags, data) "
    "VALUES (?, ?, ?, 0, ?, -1, ?, ?, ?, ?, ?, ?, ?, 0, 0, 0, 0, '')"
)

SELECT_DECKS_SQL = "SELECT decks FROM col LIMIT 1"

SELECT_CARD_ROWS_SQL = """
    SELECT n.flds, n.tags, c.did, c.ivl, c.factor, c.reps, c.lapses
    FROM notes n
    JOIN cards c ON c.nid = n.id
    ORDER BY c.id
"""
# fmt: on
