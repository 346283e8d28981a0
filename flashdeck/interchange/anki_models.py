"""
Pydantic models for the JSON blobs stored in the Anki ``col`` table (decks,
models and dconf). Field aliases carry Anki's camelCase key names; the models
are dumped with ``by_alias=True`` at the database boundary.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .anki_schema import (
    BASIC_MODEL_ID,
    DEFAULT_DECK_CONFIG_ID,
    DEFAULT_DECK_ID,
    MAX_INTERVAL_DAYS,
)


class _AnkiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class AnkiDeckEntry(_AnkiModel):
    """One entry of the ``col.decks`` JSON object."""

    id: int
    name: str
    mod: int
    usn: int = -1
    lrn_today: Tuple[int, int] = Field(default=(0, 0), alias="lrnToday")
    rev_today: Tuple[int, int] = Field(default=(0, 0), alias="revToday")
    new_today: Tuple[int, int] = Field(default=(0, 0), alias="newToday")
    time_today: Tuple[int, int] = Field(default=(0, 0), alias="timeToday")
    collapsed: bool = False
    desc: str = ""
    dyn: int = 0
    conf: int = DEFAULT_DECK_CONFIG_ID
    extend_new: int = Field(default=10, alias="extendNew")
    extend_rev: int = Field(default=50, alias="extendRev")


class AnkiTemplate(_AnkiModel):
    name: str
    ord: int
    qfmt: str
    afmt: str
    did: Optional[int] = None
    bqfmt: str = ""
    bafmt: str = ""


class AnkiField(_AnkiModel):
    name: str
    ord: int
    sticky: bool = False
    rtl: bool = False
    font: str = "Arial"
    size: int = 20
    media: List[str] = Field(default_factory=list)


class AnkiNoteType(_AnkiModel):
    """One entry of the ``col.models`` JSON object."""

    id: int
    name: str
    type: int = 0
    mod: int
    usn: int = -1
    sortf: int = 0
    did: int = DEFAULT_DECK_ID
    tmpls: List[AnkiTemplate]
    flds: List[AnkiField]
    css: str = (
        ".card { font-family: arial; font-size: 20px; text-align: center; "
        "color: black; background-color: white; }"
    )
    latex_pre: str = Field(default="", alias="latexPre")
    latex_post: str = Field(default="", alias="latexPost")
    latexsvg: bool = False
    req: List[Any] = Field(default_factory=lambda: [[0, "all", [0]]])


class AnkiLapseConfig(_AnkiModel):
    leech_fails: int = Field(default=8, alias="leechFails")
    min_int: int = Field(default=1, alias="minInt")
    delays: List[int] = Field(default_factory=lambda: [10])
    leech_action: int = Field(default=0, alias="leechAction")
    mult: float = 0


class AnkiReviewConfig(_AnkiModel):
    per_day: int = Field(default=200, alias="perDay")
    fuzz: float = 0.05
    ivl_fct: float = Field(default=1, alias="ivlFct")
    max_ivl: int = Field(default=MAX_INTERVAL_DAYS, alias="maxIvl")
    ease4: float = 1.3
    bury: bool = False
    hard_factor: float = Field(default=1.2, alias="hardFactor")


class AnkiNewConfig(_AnkiModel):
    per_day: int = Field(default=20, alias="perDay")
    delays: List[int] = Field(default_factory=lambda: [1, 10])
    separate: bool = True
    ints: List[int] = Field(default_factory=lambda: [1, 4, 7])
    initial_factor: int = Field(default=2500, alias="initialFactor")
    bury: bool = False
    order: int = 1


class AnkiDeckConfig(_AnkiModel):
    """One entry of the ``col.dconf`` JSON object."""

    id: int = DEFAULT_DECK_CONFIG_ID
    name: str = "Default"
    replayq: bool = True
    lapse: AnkiLapseConfig = Field(default_factory=AnkiLapseConfig)
    rev: AnkiReviewConfig = Field(default_factory=AnkiReviewConfig)
    new: AnkiNewConfig = Field(default_factory=AnkiNewConfig)
    max_taken: int = Field(default=60, alias="maxTaken")
    timer: int = 0
    autoplay: bool = True
    mod: int = 0
    usn: int = 0


def basic_note_type(mod: int) -> AnkiNoteType:
    """The two-field "Basic" note type with a single front/back template."""
    return AnkiNoteType(
        id=BASIC_MODEL_ID,
        name="Basic",
        mod=mod,
        tmpls=[
            AnkiTemplate(
                name="Card 1",
                ord=0,
                qfmt="{{Front}}",
                afmt="{{FrontSide}}<hr id=answer>{{Back}}",
            )
        ],
        flds=[AnkiField(name="Front", ord=0), AnkiField(name="Back", ord=1)],
    )


class CollectionMetadata(BaseModel):
    """The JSON-shaped columns of the singleton ``col`` row."""

    decks: List[AnkiDeckEntry]
    models: List[AnkiNoteType]
    deck_configs: List[AnkiDeckConfig]

    @staticmethod
    def _keyed(entries) -> str:
        return json.dumps({str(e.id): e.to_json_dict() for e in entries})

    def decks_json(self) -> str:
        return self._keyed(self.decks)

    def models_json(self) -> str:
        return self._keyed(self.models)

    def dconf_json(self) -> str:
        return self._keyed(self.deck_configs)


def parse_deck_lookup(decks_json: Optional[str]) -> Dict[int, AnkiDeckEntry]:
    """
    Build a deck id -> entry lookup from ``col.decks`` text.

    Malformed JSON or entries without a usable id and name are left out; the
    caller falls back to a generic name for any deck id it cannot resolve.
    """
    try:
        raw = json.loads(decks_json or "{}")
    except (TypeError, ValueError):
        return {}
    if not isinstance(raw, dict):
        return {}

    lookup: Dict[int, AnkiDeckEntry] = {}
    for key, info in raw.items():
        if not isinstance(info, dict):
            continue
        try:
            deck_id = int(key)
        except ValueError:
            continue
        name = info.get("name")
        if not isinstance(name, str):
            continue
        desc = info.get("desc")
        lookup[deck_id] = AnkiDeckEntry(
            id=deck_id,
            name=name,
            mod=0,
            desc=desc if isinstance(desc, str) else "",
        )
    return lookup
