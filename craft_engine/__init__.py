from craft_engine.catalog import Element, Recipe, get_recipe_key
from craft_engine.config import EngineSettings, load_config
from craft_engine.engine import CombinationEngine, CombineResult, EngineListener, build_engine
from craft_engine.generator import RecipeGenerator, GenerationError, synthesize_fallback
from craft_engine.persistence import SavedState, InvalidSaveError
from craft_engine.storage import KeyValueStore, MemoryStore, SqliteStore, StorageError, open_store

__version__ = "1.0.0"
__all__ = [
    "Element",
    "Recipe",
    "get_recipe_key",
    "EngineSettings",
    "load_config",
    "CombinationEngine",
    "CombineResult",
    "EngineListener",
    "build_engine",
    "RecipeGenerator",
    "GenerationError",
    "synthesize_fallback",
    "SavedState",
    "InvalidSaveError",
    "KeyValueStore",
    "MemoryStore",
    "SqliteStore",
    "StorageError",
    "open_store",
]
