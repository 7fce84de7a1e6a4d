import asyncio
import os
from types import SimpleNamespace

import anthropic

from craft_engine.catalog import Recipe
from craft_engine.generator import (
    DEFAULT_FALLBACK_GLYPH, GenerationError, RecipeGenerator, synthesize_fallback,
)


class FakeMessages:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.reply, Exception):
            raise self.reply
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.reply)])


class FakeClient:
    def __init__(self, reply):
        self.messages = FakeMessages(reply)


def test_fallback_rules():
    print("\n" + "="*70)
    print("TEST 1: Fallback Rules")
    print("="*70)

    cases = [
        (("Fire", "Unobtainium"), Recipe("Fire essence", DEFAULT_FALLBACK_GLYPH)),
        (("Fire", "Water"), Recipe("Fire juice", "💧")),
        (("Rainwater", "Moon"), Recipe("Rainwater juice", "💧")),
        (("Ghost", "EARTHQUAKE"), Recipe("Ghost dust", "🟤")),
        (("Air", "Earth"), Recipe("Air dust", "🟤")),
        (("Water", "Earth"), Recipe("Water juice", "💧")),
    ]
    for (first, second), expected in cases:
        recipe = synthesize_fallback(first, second)
        print(f"  {first} + {second} -> {recipe.glyph} {recipe.result}")
        assert recipe == expected

    custom = [("moon", "dust", "🌑")]
    assert synthesize_fallback("Fire", "Moon", custom) == Recipe("Fire dust", "🌑")
    assert synthesize_fallback("Fire", "Water", []).result == "Fire essence"
    print("✓ Fallback rules test passed\n")


def test_response_parsing():
    print("\n" + "="*70)
    print("TEST 2: Response Parsing")
    print("="*70)

    generator = RecipeGenerator(llm_model="mock")
    cases = [
        ('{"result": "Steam", "glyph": "♨️"}', Recipe("Steam", "♨️")),
        ('Sure! {"result": "  Geyser ", "glyph": "♨️"} Enjoy.', Recipe("Geyser", "♨️")),
        ('```json\n{"result": "Mud", "glyph": "💩"}\n```', Recipe("Mud", "💩")),
        ("Steam ♨️", None),
        ('{"result": "Steam"}', None),
        ('{"result": "", "glyph": "♨️"}', None),
        ('{"result": 42, "glyph": "♨️"}', None),
        ('{"result": "Steam", "glyph": "' + "x" * 40 + '"}', None),
        ('{"result": "Steam", "glyph": ', None),
        ("", None),
    ]
    for text, expected in cases:
        parsed = generator._parse_response(text)
        print(f"  {text[:40]!r:45} -> {parsed}")
        assert parsed == expected
    print("✓ Response parsing test passed\n")


def test_successful_generation():
    print("\n" + "="*70)
    print("TEST 3: Successful Generation")
    print("="*70)

    client = FakeClient('{"result": "Obsidian Dragon", "glyph": "🐉"}')
    generator = RecipeGenerator(llm_model="test-model", client=client, max_tokens=123, temperature=0.2)

    recipe = asyncio.run(generator.generate("Dragon", "Obsidian"))
    assert recipe == Recipe("Obsidian Dragon", "🐉")

    assert len(client.messages.calls) == 1
    call = client.messages.calls[0]
    assert call["model"] == "test-model"
    assert call["max_tokens"] == 123
    assert call["temperature"] == 0.2
    assert call["system"] == generator.system_prompt
    prompt = call["messages"][0]["content"]
    assert "First element: Dragon" in prompt
    assert "Second element: Obsidian" in prompt

    stats = generator.get_statistics()
    assert stats["total_requests"] == 1
    assert stats["total_generated"] == 1
    assert stats["total_fallbacks"] == 0
    print("✓ Successful generation test passed\n")


def test_failed_request_uses_fallback():
    print("\n" + "="*70)
    print("TEST 4: Failed Request Uses Fallback")
    print("="*70)

    generator = RecipeGenerator(llm_model="test-model", client=FakeClient(ConnectionError("network down")))
    recipe = asyncio.run(generator.generate("Fire", "Unobtainium"))
    assert recipe == Recipe("Fire essence", DEFAULT_FALLBACK_GLYPH)

    stats = generator.get_statistics()
    assert stats["total_requests"] == 1
    assert stats["total_failures"] == 1
    assert stats["total_fallbacks"] == 1
    print("✓ Failed request test passed\n")


def test_malformed_response_uses_fallback():
    print("\n" + "="*70)
    print("TEST 5: Malformed Response Uses Fallback")
    print("="*70)

    generator = RecipeGenerator(llm_model="test-model", client=FakeClient("I think it makes tea."))
    recipe = asyncio.run(generator.generate("Water", "Leaf"))
    assert recipe == Recipe("Water juice", "💧")
    assert generator.total_failures == 1
    print("✓ Malformed response test passed\n")


def test_mock_model_has_no_client():
    print("\n" + "="*70)
    print("TEST 6: Mock Model Skips External Calls")
    print("="*70)

    generator = RecipeGenerator(llm_model="mock")
    assert generator.client is None
    recipe = asyncio.run(generator.generate("Ghost", "Music"))
    assert recipe.result == "Ghost essence"
    assert generator.total_requests == 0
    print("✓ Mock model test passed\n")


def test_client_construction_depends_on_api_key():
    print("\n" + "="*70)
    print("TEST 7: Client Construction")
    print("="*70)

    saved = os.environ.pop("ANTHROPIC_API_KEY", None)
    try:
        assert RecipeGenerator().client is None
        generator = RecipeGenerator(api_key="sk-test-not-real")
        assert isinstance(generator.client, anthropic.AsyncAnthropic)
    finally:
        if saved is not None:
            os.environ["ANTHROPIC_API_KEY"] = saved
    print("✓ Client construction test passed\n")


def test_fallback_disabled_raises():
    print("\n" + "="*70)
    print("TEST 8: Disabled Fallback Raises")
    print("="*70)

    generator = RecipeGenerator(llm_model="mock", use_fallback=False)
    try:
        asyncio.run(generator.generate("Fire", "Unobtainium"))
        assert False, "Expected GenerationError"
    except GenerationError as e:
        print(f"  Raised: {e}")
    print("✓ Disabled fallback test passed\n")


def test_statistics_reset():
    print("\n" + "="*70)
    print("TEST 9: Statistics Reset")
    print("="*70)

    generator = RecipeGenerator(llm_model="mock")
    for i in range(3):
        asyncio.run(generator.generate(f"Thing{i}", "Fire"))
    assert generator.get_statistics()["total_fallbacks"] == 3

    generator.reset_statistics()
    assert generator.get_statistics()["total_fallbacks"] == 0
    print("✓ Statistics reset test passed\n")


def run_all_tests():
    tests = [
        test_fallback_rules,
        test_response_parsing,
        test_successful_generation,
        test_failed_request_uses_fallback,
        test_malformed_response_uses_fallback,
        test_mock_model_has_no_client,
        test_client_construction_depends_on_api_key,
        test_fallback_disabled_raises,
        test_statistics_reset,
    ]
    failed = 0
    for test in tests:
        try:
            test()
        except Exception as e:
            print(f"\n❌ {test.__name__} FAILED: {e}")
            failed += 1
    print(f"\n{'='*70}\n  Passed: {len(tests) - failed}/{len(tests)}\n{'='*70}\n")


if __name__ == "__main__":
    run_all_tests()
