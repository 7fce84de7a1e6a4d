"""
Combination engine for the element-crafting game.

Owns the element catalog, recipe table and discovery set, and keeps them
persisted in a key-value store. Unknown pairs are sent to a RecipeGenerator;
concurrent requests for the same pair share a single in-flight generation.

Example:
    >>> engine = CombinationEngine(MemoryStore(), RecipeGenerator(llm_model="mock"))
    >>> result = asyncio.run(engine.combine("Earth", "Water"))
    >>> result.result, result.is_new
    ('Plant', True)
"""

import asyncio
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from craft_engine.catalog import (
    Element, Recipe, PLACEHOLDER_GLYPH, STARTING_ELEMENTS,
    get_recipe_key, seed_elements, seed_recipes,
)
from craft_engine.config import DEFAULT_AUTOSAVE_INTERVAL, DEFAULT_STATE_KEY, EngineSettings
from craft_engine.generator import GenerationError, RecipeGenerator
from craft_engine.persistence import (
    BACKUP_SUFFIX, CORRUPT_SUFFIX, PREIMPORT_SUFFIX, CURRENT_VERSION,
    InvalidSaveError, SavedState, decode_document, decode_state, encode_state,
    missing_fields, parse_document, timestamped_key,
)
from craft_engine.storage import KeyValueStore, StorageError, open_store

logger = logging.getLogger("craft_engine.engine")

COMBINE_FAILED_MESSAGE = "These elements cannot be combined."
COMBINE_INTERRUPTED_MESSAGE = "The game was reset while combining."


@dataclass
class CombineResult:
    success: bool
    result: Optional[str] = None
    glyph: Optional[str] = None
    is_new: bool = False
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EngineListener:
    """Receives engine notifications. Override the hooks you need."""

    def element_discovered(self, name: str, glyph: str):
        pass

    def combine_started(self, first: str, second: str):
        pass

    def combine_succeeded(self, result: str, glyph: str, is_new: bool):
        pass

    def combine_failed(self, message: str):
        pass

    def state_refreshed(self):
        pass


class CombinationEngine:

    def __init__(self, store: KeyValueStore, generator: Optional[RecipeGenerator] = None,
                 state_key: str = DEFAULT_STATE_KEY, listeners: Optional[List[EngineListener]] = None,
                 autosave_interval: float = DEFAULT_AUTOSAVE_INTERVAL):
        self.store = store
        self.generator = generator or RecipeGenerator(llm_model="mock")
        self.state_key = state_key
        self.autosave_interval = autosave_interval
        self.version = CURRENT_VERSION

        self.elements: Dict[str, str] = {}
        self.recipes: Dict[str, Recipe] = {}
        self.discovered: set = set()
        self._pending: Dict[str, asyncio.Future] = {}
        # Bumped whenever the tables are replaced; in-flight generations
        # started under an older epoch are discarded.
        self._epoch = 0
        self._listeners: List[EngineListener] = list(listeners or [])
        self._autosave_task: Optional[asyncio.Task] = None

        self._initialize()

    # ── Initialization ──────────────────────────────────────────────

    def _initialize(self):
        raw = self._read(self.state_key)
        if raw is not None:
            try:
                state, migrated = decode_state(raw)
            except InvalidSaveError as e:
                logger.error("Saved state is corrupted (%s); archiving and starting fresh", e)
                self._archive(CORRUPT_SUFFIX, raw)
                self._clear()
            else:
                if migrated:
                    self._merge(state)
                else:
                    self._adopt(state)
        self._seed()
        self.save_state()

    def _adopt(self, state: SavedState):
        self.elements = dict(state.elements)
        self.recipes = dict(state.recipes)
        self.discovered = set(state.discovered)

    def _merge(self, state: SavedState):
        self.elements.update(state.elements)
        self.recipes.update(state.recipes)
        self.discovered |= state.discovered

    def _clear(self):
        self.elements = {}
        self.recipes = {}
        self.discovered = set()
        self._invalidate_pending()

    def _invalidate_pending(self):
        self._epoch += 1
        self._pending.clear()

    def _seed(self):
        for name, glyph in seed_elements().items():
            self.elements.setdefault(name, glyph)
        for key, recipe in seed_recipes().items():
            self.recipes.setdefault(key, recipe)
        self.discovered.update(STARTING_ELEMENTS)
        for name in self.discovered:
            self.elements.setdefault(name, PLACEHOLDER_GLYPH)

    # ── Listeners ───────────────────────────────────────────────────

    def add_listener(self, listener: EngineListener):
        self._listeners.append(listener)

    def remove_listener(self, listener: EngineListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: str, *args):
        for listener in list(self._listeners):
            try:
                getattr(listener, event)(*args)
            except Exception:
                logger.exception("Listener %r failed handling %s", listener, event)

    # ── Combination ─────────────────────────────────────────────────

    def get_recipe_key(self, first: str, second: str) -> str:
        return get_recipe_key(first, second)

    @property
    def pending_pairs(self) -> List[str]:
        return sorted(self._pending)

    async def combine(self, first: str, second: str) -> CombineResult:
        key = self.get_recipe_key(first, second)
        recipe = self.recipes.get(key)

        if recipe is None:
            epoch = self._epoch
            self._emit("combine_started", first, second)
            try:
                recipe = await self._generate(first, second, key)
            except GenerationError as e:
                logger.warning("Combination %s + %s failed: %s", first, second, e)
                self._emit("combine_failed", COMBINE_FAILED_MESSAGE)
                return CombineResult(success=False, message=COMBINE_FAILED_MESSAGE)
            if epoch != self._epoch:
                logger.info("Discarding %s + %s result: state was replaced mid-generation", first, second)
                self._emit("combine_failed", COMBINE_INTERRUPTED_MESSAGE)
                return CombineResult(success=False, message=COMBINE_INTERRUPTED_MESSAGE)

        is_new = recipe.result not in self.discovered
        self.elements[recipe.result] = recipe.glyph
        if is_new:
            self.discovered.add(recipe.result)
            logger.info("New element discovered: %s %s", recipe.glyph, recipe.result)

        self.save_state()
        if is_new:
            self._emit("element_discovered", recipe.result, recipe.glyph)
        self._emit("combine_succeeded", recipe.result, recipe.glyph, is_new)
        return CombineResult(success=True, result=recipe.result, glyph=recipe.glyph, is_new=is_new)

    async def _generate(self, first: str, second: str, key: str) -> Recipe:
        pending = self._pending.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._learn_recipe(first, second, key))
            self._pending[key] = pending
        return await asyncio.shield(pending)

    async def _learn_recipe(self, first: str, second: str, key: str) -> Recipe:
        epoch = self._epoch
        try:
            recipe = await self.generator.generate(first, second)
            if epoch == self._epoch:
                self.recipes[key] = recipe
            return recipe
        finally:
            if self._pending.get(key) is asyncio.current_task():
                del self._pending[key]

    # ── Persistence ─────────────────────────────────────────────────

    def snapshot(self) -> SavedState:
        return SavedState(
            version=self.version,
            elements=dict(self.elements),
            recipes=dict(self.recipes),
            discovered=set(self.discovered),
        )

    def save_state(self) -> bool:
        document = encode_state(self.snapshot())
        try:
            previous = self.store.get(self.state_key)
            if previous is not None:
                self.store.set(self.state_key + BACKUP_SUFFIX, previous)
            self.store.set(self.state_key, document)
        except StorageError as e:
            logger.error("Error saving state: %s", e)
            return False
        return True

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except StorageError as e:
            logger.error("Error loading saved state: %s", e)
            return None

    def _archive(self, suffix: str, raw: str) -> Optional[str]:
        key = timestamped_key(self.state_key, suffix)
        try:
            self.store.set(key, raw)
        except StorageError as e:
            logger.error("Could not archive state under %s: %s", key, e)
            return None
        logger.info("Archived state under %s", key)
        return key

    def reset_to_default(self):
        self._clear()
        self._seed()
        self.save_state()
        logger.info("Game reset to default state")
        self._emit("state_refreshed")

    # ── Export / import ─────────────────────────────────────────────

    def export_state(self) -> str:
        return encode_state(self.snapshot(), exported=True)

    def export_to_file(self, path: str) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.export_state(), encoding="utf-8")
        return path

    def import_state(self, document: str):
        data = parse_document(document)
        missing = missing_fields(data)
        if missing:
            raise InvalidSaveError(f"Import is missing required fields: {', '.join(missing)}")
        state, migrated = decode_document(data, strict_migration=True)
        if migrated:
            logger.info("Imported document migrated from version %s", data.get("version"))

        self._archive(PREIMPORT_SUFFIX, encode_state(self.snapshot()))
        self._invalidate_pending()
        self._adopt(state)
        self._seed()
        self.save_state()
        logger.info("Imported %d elements, %d recipes, %d discoveries",
                    len(self.elements), len(self.recipes), len(self.discovered))
        self._emit("state_refreshed")

    def import_from_file(self, path: str):
        self.import_state(Path(path).read_text(encoding="utf-8"))

    # ── Queries ─────────────────────────────────────────────────────

    def discovered_elements(self) -> List[Element]:
        return [Element(name=name, glyph=self.elements[name]) for name in sorted(self.discovered)]

    def discovery_progress(self) -> Tuple[int, int]:
        return len(self.discovered), len(self.elements)

    def get_statistics(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "total_elements": len(self.elements),
            "total_recipes": len(self.recipes),
            "total_discovered": len(self.discovered),
            "pending_generations": len(self._pending),
            "generator": self.generator.get_statistics(),
        }

    # ── Autosave ────────────────────────────────────────────────────

    def start_autosave(self) -> asyncio.Task:
        """Schedule periodic saves on the running event loop."""
        if self._autosave_task is None or self._autosave_task.done():
            self._autosave_task = asyncio.ensure_future(self._autosave_loop())
        return self._autosave_task

    def stop_autosave(self):
        if self._autosave_task is not None:
            self._autosave_task.cancel()
            self._autosave_task = None

    async def _autosave_loop(self):
        while True:
            await asyncio.sleep(self.autosave_interval)
            self.save_state()

    def close(self):
        self.stop_autosave()
        self.save_state()
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def build_engine(settings: Optional[EngineSettings] = None,
                 listeners: Optional[List[EngineListener]] = None) -> CombinationEngine:
    settings = settings or EngineSettings()
    store = open_store(settings.storage_backend, settings.storage_path)
    generator = RecipeGenerator(
        llm_model=settings.model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        timeout=settings.timeout,
        use_fallback=settings.use_fallback,
    )
    return CombinationEngine(
        store, generator,
        state_key=settings.state_key,
        listeners=listeners,
        autosave_interval=settings.autosave_interval,
    )
