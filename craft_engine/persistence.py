"""
Saved-state documents: encoding, decoding and version migration.

Document layout (current version):

    {
        "version": "2.0",
        "elements": [[name, glyph], ...],
        "recipes": [[pair_key, {"result": ..., "glyph": ...}], ...],
        "discovered": [name, ...]
    }

Version "1.0" is the unversioned legacy layout, which stored recipe glyphs
under "emoji". Each version transition has its own migration function;
documents from a version with no registered migration are adopted field by
field.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from craft_engine.catalog import Recipe

logger = logging.getLogger("craft_engine.persistence")

CURRENT_VERSION = "2.0"
LEGACY_VERSION = "1.0"
REQUIRED_FIELDS = ("version", "elements", "recipes", "discovered")
STATE_FIELDS = ("elements", "recipes", "discovered")

BACKUP_SUFFIX = ".backup"
CORRUPT_SUFFIX = ".corrupt"
PREIMPORT_SUFFIX = ".preimport"


class InvalidSaveError(ValueError):
    pass


@dataclass
class SavedState:
    version: str = CURRENT_VERSION
    elements: Dict[str, str] = field(default_factory=dict)
    recipes: Dict[str, Recipe] = field(default_factory=dict)
    discovered: Set[str] = field(default_factory=set)

    def to_document(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "elements": [[name, glyph] for name, glyph in self.elements.items()],
            "recipes": [[key, recipe.to_dict()] for key, recipe in self.recipes.items()],
            "discovered": sorted(self.discovered),
        }


def encode_state(state: SavedState, exported: bool = False) -> str:
    document = state.to_document()
    if exported:
        document["exportedAt"] = datetime.now().isoformat()
    return json.dumps(document, ensure_ascii=False)


def parse_document(raw: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise InvalidSaveError(f"Save data is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidSaveError("Save data must be a JSON object")
    return data


def missing_fields(data: Dict[str, Any]) -> List[str]:
    return [name for name in REQUIRED_FIELDS if name not in data]


# ── Field readers ──────────────────────────────────────────────────

def _read_elements(value: Any) -> Dict[str, str]:
    if not isinstance(value, list):
        raise InvalidSaveError("'elements' must be a list of [name, glyph] pairs")
    elements = {}
    for entry in value:
        if (not isinstance(entry, (list, tuple)) or len(entry) != 2
                or not all(isinstance(part, str) for part in entry)):
            raise InvalidSaveError(f"Malformed element entry: {entry!r}")
        elements[entry[0]] = entry[1]
    return elements


def _read_recipe(value: Any) -> Recipe:
    if not isinstance(value, dict):
        raise InvalidSaveError(f"Malformed recipe value: {value!r}")
    result, glyph = value.get("result"), value.get("glyph")
    if not isinstance(result, str) or not isinstance(glyph, str):
        raise InvalidSaveError(f"Recipe needs string 'result' and 'glyph': {value!r}")
    return Recipe(result=result, glyph=glyph)


def _read_recipes(value: Any) -> Dict[str, Recipe]:
    if not isinstance(value, list):
        raise InvalidSaveError("'recipes' must be a list of [key, recipe] pairs")
    recipes = {}
    for entry in value:
        if not isinstance(entry, (list, tuple)) or len(entry) != 2 or not isinstance(entry[0], str):
            raise InvalidSaveError(f"Malformed recipe entry: {entry!r}")
        recipes[entry[0]] = _read_recipe(entry[1])
    return recipes


def _read_discovered(value: Any) -> Set[str]:
    if not isinstance(value, list) or not all(isinstance(name, str) for name in value):
        raise InvalidSaveError("'discovered' must be a list of element names")
    return set(value)


_READERS: Dict[str, Callable[[Any], Any]] = {
    "elements": _read_elements,
    "recipes": _read_recipes,
    "discovered": _read_discovered,
}


def _adopt_present_fields(data: Dict[str, Any], strict: bool = True) -> SavedState:
    """Read each present field; a lenient read skips fields that fail to parse."""
    state = SavedState()
    for name in STATE_FIELDS:
        if name not in data:
            continue
        try:
            setattr(state, name, _READERS[name](data[name]))
        except InvalidSaveError as e:
            if strict:
                raise
            logger.warning("Skipping unreadable field %r during migration: %s", name, e)
    return state


# ── Migrations ─────────────────────────────────────────────────────

def _migrate_from_1_0(data: Dict[str, Any]) -> Dict[str, Any]:
    migrated = {key: value for key, value in data.items() if key in STATE_FIELDS}
    if isinstance(migrated.get("recipes"), list):
        renamed = []
        for entry in migrated["recipes"]:
            if isinstance(entry, (list, tuple)) and len(entry) == 2 and isinstance(entry[1], dict):
                value = dict(entry[1])
                if "glyph" not in value and "emoji" in value:
                    value["glyph"] = value.pop("emoji")
                entry = [entry[0], value]
            renamed.append(entry)
        migrated["recipes"] = renamed
    migrated["version"] = CURRENT_VERSION
    return migrated


MIGRATIONS: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    LEGACY_VERSION: _migrate_from_1_0,
}


def document_version(data: Dict[str, Any]) -> str:
    version = data.get("version", LEGACY_VERSION)
    return str(version)


def migrate_document(data: Dict[str, Any], strict: bool = False) -> SavedState:
    version = document_version(data)
    migration = MIGRATIONS.get(version)
    if migration is None:
        logger.warning("No migration registered for save version %s; adopting present fields", version)
        return _adopt_present_fields(data, strict)
    logger.info("Migrating save data from version %s to %s", version, CURRENT_VERSION)
    return _adopt_present_fields(migration(data), strict)


def decode_document(data: Dict[str, Any], strict_migration: bool = False) -> Tuple[SavedState, bool]:
    """Return the decoded state and whether a migration was applied.

    Current-version documents are always validated strictly. Older versions
    keep every readable field unless ``strict_migration`` is set.
    """
    if document_version(data) == CURRENT_VERSION:
        missing = missing_fields(data)
        if missing:
            raise InvalidSaveError(f"Save data missing required fields: {', '.join(missing)}")
        return _adopt_present_fields(data), False
    return migrate_document(data, strict_migration), True


def decode_state(raw: str) -> Tuple[SavedState, bool]:
    return decode_document(parse_document(raw))


def timestamped_key(state_key: str, suffix: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%dT%H%M%S%f")
    return f"{state_key}{suffix}.{stamp}"
