"""
Element catalog and seed data.

Seed elements and recipes are the baseline every fresh or reset engine
starts from. Recipes are keyed by the unordered pair of their inputs.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Tuple

RECIPE_KEY_SEPARATOR = "_"
PLACEHOLDER_GLYPH = "❔"

STARTING_ELEMENTS = ("Water", "Fire", "Earth", "Air")


@dataclass(frozen=True)
class Element:
    name: str
    glyph: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Recipe:
    result: str
    glyph: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def get_recipe_key(first: str, second: str) -> str:
    """Order-independent key for a pair of element names."""
    return RECIPE_KEY_SEPARATOR.join(sorted((first, second)))


SEED_ELEMENTS: List[Tuple[str, str]] = [
    ("Water", "💧"), ("Fire", "🔥"), ("Earth", "🌍"), ("Air", "💨"),
    ("Steam", "♨️"), ("Mud", "💩"), ("Lava", "🌋"), ("Cloud", "☁️"),
    ("Energy", "⚡"), ("Dust", "💨"), ("Lake", "💧"), ("Inferno", "🔥"),
    ("Mountain", "⛰️"), ("Sky", "🌤️"), ("Pressure", "💨"), ("Smoke", "💨"),
    ("Geyser", "♨️"), ("Rain", "🌧️"), ("Brick", "🧱"), ("Swamp", "🥬"),
    ("Clay", "🏺"), ("Pottery", "🏺"), ("Stone", "🪨"), ("Magma", "🌋"),
    ("Obsidian", "🖤"), ("Lightning", "⚡"), ("Wind", "💨"), ("Storm", "⛈️"),
    ("Wave", "🌊"), ("Plasma", "🌟"), ("Life", "🌱"), ("Thunder", "🌩️"),
    ("Sand", "🏖️"), ("Haze", "🌫️"), ("Mineral", "💎"), ("Rainbow", "🌈"),
    ("Metal", "⚙️"), ("Island", "🏝️"), ("Mist", "🌫️"), ("Waterfall", "🌊"),
    ("Volcano", "🌋"), ("Wildfire", "🔥"), ("Eruption", "🌋"), ("River", "🌊"),
    ("Peak", "🗻"), ("Sun", "☀️"), ("Horizon", "🌅"), ("Weather", "🌤️"),
    ("Snow", "❄️"), ("Ice", "🧊"), ("Glacier", "🧊"), ("Fog", "🌫️"),
    ("Plant", "🌱"), ("Tree", "🌳"), ("Forest", "🌲"), ("Jungle", "🌴"),
    ("Flower", "🌸"), ("Pollen", "✨"), ("Fruit", "🍎"), ("Diamond", "💎"),
    ("Stars", "✨"), ("Galaxy", "🌌"), ("Universe", "🌌"), ("Moon", "🌙"),
    ("Animal", "🦁"), ("Fish", "🐟"), ("Bird", "🦅"), ("Human", "👤"),
    ("Tool", "🔧"), ("Wood", "🪵"), ("Weapon", "⚔️"), ("Family", "👨‍👩‍👦"),
    ("Village", "🏘️"), ("City", "🌆"), ("Metropolis", "🌃"), ("Machine", "⚙️"),
    ("Computer", "💻"), ("AI", "🤖"), ("Electricity", "⚡"), ("Car", "🚗"),
    ("Plane", "✈️"), ("Rocket", "🚀"), ("Science", "🔬"), ("Art", "🎨"),
    ("Music", "🎵"), ("Love", "❤️"), ("Peace", "☮️"), ("War", "⚔️"),
    ("Death", "💀"), ("Ghost", "👻"), ("Angel", "👼"), ("Space", "🌌"),
    ("Time", "⌛"), ("Dragon", "🐉"), ("Unicorn", "🦄"), ("Mermaid", "🧜‍♀️"),
    ("Witch", "🧙‍♀️"), ("Fairy", "🧚"), ("Demon", "👿"), ("Pegasus", "🦄"),
]

# (first, second, result, glyph)
SEED_RECIPES: List[Tuple[str, str, str, str]] = [
    ("Water", "Fire", "Steam", "♨️"),
    ("Water", "Earth", "Plant", "🌱"),
    ("Fire", "Earth", "Lava", "🌋"),
    ("Water", "Air", "Cloud", "☁️"),
    ("Fire", "Air", "Energy", "⚡"),
    ("Earth", "Air", "Dust", "💨"),

    ("Water", "Water", "Lake", "💧"),
    ("Fire", "Fire", "Inferno", "🔥"),
    ("Earth", "Earth", "Mountain", "⛰️"),
    ("Air", "Air", "Sky", "🌤️"),

    ("Steam", "Steam", "Pressure", "💨"),
    ("Steam", "Fire", "Smoke", "💨"),
    ("Steam", "Earth", "Geyser", "♨️"),
    ("Steam", "Air", "Rain", "🌧️"),
    ("Steam", "Water", "Cloud", "☁️"),

    ("Mud", "Fire", "Brick", "🧱"),
    ("Mud", "Water", "Swamp", "🥬"),
    ("Mud", "Air", "Dust", "💨"),
    ("Mud", "Earth", "Clay", "🏺"),
    ("Mud", "Steam", "Pottery", "🏺"),

    ("Lava", "Water", "Stone", "🪨"),
    ("Lava", "Air", "Smoke", "💨"),
    ("Lava", "Earth", "Volcano", "🌋"),
    ("Lava", "Fire", "Magma", "🌋"),
    ("Lava", "Steam", "Obsidian", "🖤"),

    ("Cloud", "Fire", "Lightning", "⚡"),
    ("Cloud", "Water", "Rain", "🌧️"),
    ("Cloud", "Earth", "Fog", "🌫️"),
    ("Cloud", "Air", "Wind", "💨"),
    ("Cloud", "Energy", "Storm", "⛈️"),

    ("Energy", "Water", "Wave", "🌊"),
    ("Energy", "Fire", "Plasma", "🌟"),
    ("Energy", "Earth", "Life", "🌱"),
    ("Energy", "Air", "Lightning", "⚡"),
    ("Energy", "Storm", "Thunder", "🌩️"),

    ("Dust", "Water", "Mud", "💩"),
    ("Dust", "Fire", "Smoke", "💨"),
    ("Dust", "Earth", "Sand", "🏖️"),
    ("Dust", "Air", "Storm", "🌪️"),
    ("Dust", "Cloud", "Haze", "🌫️"),

    ("Stone", "Water", "Mineral", "💎"),
    ("Rain", "Sun", "Rainbow", "🌈"),
    ("Stone", "Fire", "Metal", "⚙️"),

    ("Lake", "Fire", "Steam", "♨️"),
    ("Lake", "Earth", "Island", "🏝️"),
    ("Lake", "Air", "Mist", "🌫️"),
    ("Lake", "Mountain", "Waterfall", "🌊"),

    ("Inferno", "Water", "Obsidian", "🖤"),
    ("Inferno", "Earth", "Volcano", "🌋"),
    ("Inferno", "Air", "Wildfire", "🔥"),
    ("Inferno", "Mountain", "Eruption", "🌋"),

    ("Mountain", "Water", "River", "🌊"),
    ("Mountain", "Fire", "Volcano", "🌋"),
    ("Mountain", "Air", "Wind", "💨"),
    ("Mountain", "Cloud", "Peak", "🗻"),

    ("Sky", "Water", "Rain", "🌧️"),
    ("Sky", "Fire", "Sun", "☀️"),
    ("Sky", "Earth", "Horizon", "🌅"),
    ("Sky", "Cloud", "Weather", "🌤️"),
]


def seed_elements() -> Dict[str, str]:
    return dict(SEED_ELEMENTS)


def seed_recipes() -> Dict[str, Recipe]:
    recipes: Dict[str, Recipe] = {}
    for first, second, result, glyph in SEED_RECIPES:
        recipes[get_recipe_key(first, second)] = Recipe(result=result, glyph=glyph)
    return recipes
