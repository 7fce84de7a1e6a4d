import json
import logging
import os
import re
from typing import Any, Dict, List, Optional, Tuple

import anthropic

from craft_engine.catalog import Recipe
from craft_engine.config import DEFAULT_MODEL

logger = logging.getLogger("craft_engine.generator")

MOCK_MODEL = "mock"
MAX_GLYPH_LENGTH = 16
MAX_RESULT_LENGTH = 64

# (keyword, suffix, glyph); first match on either input wins.
FALLBACK_RULES: List[Tuple[str, str, str]] = [
    ("water", "juice", "💧"),
    ("earth", "dust", "🟤"),
    ("air", "breeze", "🌬️"),
    ("energy", "spark", "⚡"),
    ("life", "seed", "🌱"),
    ("stone", "rubble", "🪨"),
    ("cloud", "drizzle", "🌦️"),
]
DEFAULT_FALLBACK_SUFFIX = "essence"
DEFAULT_FALLBACK_GLYPH = "✨"

GENERATOR_SYSTEM_PROMPT = """You are the crafting oracle of an element-combination game. Players drag two elements together and you decide what they become.

Rules:
- The result is a single, concrete, recognisable concept (an object, material, creature, place, phenomenon or idea), usually one or two words.
- Prefer intuitive, playful results over literal concatenations of the inputs.
- The glyph is one emoji (or a very short emoji sequence) that depicts the result.

Respond with a single JSON object and nothing else:

{"result": "<name>", "glyph": "<emoji>"}
"""


class GenerationError(RuntimeError):
    pass


def synthesize_fallback(first: str, second: str,
                        rules: Optional[List[Tuple[str, str, str]]] = None) -> Recipe:
    """Deterministic recipe used when the generative model gives no usable answer."""
    haystacks = (first.lower(), second.lower())
    for keyword, suffix, glyph in (FALLBACK_RULES if rules is None else rules):
        if any(keyword.lower() in name for name in haystacks):
            return Recipe(result=f"{first} {suffix}", glyph=glyph)
    return Recipe(result=f"{first} {DEFAULT_FALLBACK_SUFFIX}", glyph=DEFAULT_FALLBACK_GLYPH)


class RecipeGenerator:

    def __init__(self, llm_model: str = DEFAULT_MODEL, client: Any = None, api_key: Optional[str] = None,
                 system_prompt: Optional[str] = None, temperature: float = 0.7, max_tokens: int = 200,
                 timeout: float = 30.0, use_fallback: bool = True,
                 fallback_rules: Optional[List[Tuple[str, str, str]]] = None):
        self.llm_model = llm_model
        self.system_prompt = system_prompt or GENERATOR_SYSTEM_PROMPT
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.use_fallback = use_fallback
        self.fallback_rules = FALLBACK_RULES if fallback_rules is None else fallback_rules

        if client is not None:
            self.client = client
        elif llm_model == MOCK_MODEL:
            self.client = None
        else:
            api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
            if api_key:
                self.client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout)
            else:
                logger.warning("ANTHROPIC_API_KEY not set; recipes will come from fallback rules only")
                self.client = None

        self.total_requests = 0
        self.total_generated = 0
        self.total_failures = 0
        self.total_fallbacks = 0

    async def generate(self, first: str, second: str) -> Recipe:
        recipe = await self._query_llm(first, second)
        if recipe is not None:
            self.total_generated += 1
            return recipe

        if not self.use_fallback:
            raise GenerationError(f"Could not generate a result for {first} + {second}")

        recipe = synthesize_fallback(first, second, self.fallback_rules)
        self.total_fallbacks += 1
        logger.info("Fallback recipe for %s + %s: %s", first, second, recipe.result)
        return recipe

    async def _query_llm(self, first: str, second: str) -> Optional[Recipe]:
        if self.client is None:
            return None

        self.total_requests += 1
        try:
            response = await self.client.messages.create(
                model=self.llm_model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=self.system_prompt,
                messages=[{"role": "user", "content": self._build_prompt(first, second)}],
            )
        except Exception as e:
            self.total_failures += 1
            logger.warning("Generation request for %s + %s failed: %s", first, second, e)
            return None

        text = _response_text(response)
        recipe = self._parse_response(text)
        if recipe is None:
            self.total_failures += 1
            logger.warning("Unparseable generation response for %s + %s: %r", first, second, text[:200])
        return recipe

    def _build_prompt(self, first: str, second: str) -> str:
        return f"""First element: {first}
Second element: {second}

What do these two elements make when combined?

Answer with exactly one JSON object of the form {{"result": "<name>", "glyph": "<emoji>"}} and no other text."""

    def _parse_response(self, response: str) -> Optional[Recipe]:
        match = re.search(r'\{.*?\}', response or "", re.DOTALL)
        if not match:
            return None
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None

        result, glyph = data.get("result"), data.get("glyph")
        if not isinstance(result, str) or not isinstance(glyph, str):
            return None
        result, glyph = result.strip(), glyph.strip()
        if not result or not glyph or len(result) > MAX_RESULT_LENGTH or len(glyph) > MAX_GLYPH_LENGTH:
            return None
        return Recipe(result=result, glyph=glyph)

    def get_statistics(self) -> Dict[str, Any]:
        return {
            "model": self.llm_model,
            "client_available": self.client is not None,
            "total_requests": self.total_requests,
            "total_generated": self.total_generated,
            "total_failures": self.total_failures,
            "total_fallbacks": self.total_fallbacks,
        }

    def reset_statistics(self):
        self.total_requests = 0
        self.total_generated = 0
        self.total_failures = 0
        self.total_fallbacks = 0


def _response_text(response: Any) -> str:
    parts = []
    for block in getattr(response, "content", None) or []:
        text = getattr(block, "text", None)
        if isinstance(text, str):
            parts.append(text)
    return "".join(parts).strip()
