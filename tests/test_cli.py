import json
import tempfile
from pathlib import Path
from craft_engine.__main__ import main
from craft_engine.storage import SqliteStore


def _run(db_path, *args):
    return main(["--db", db_path, "--model", "mock", *args])


def test_combine_and_list():
    print("\n" + "="*70)
    print("TEST 1: CLI Combine And List")
    print("="*70)

    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = str(Path(tmpdir) / "craft.db")
        assert _run(db_path, "combine", "Water", "Fire") == 0
        assert _run(db_path, "combine", "Fire", "Unobtainium") == 0
        assert _run(db_path, "list") == 0
        assert _run(db_path, "stats") == 0

        store = SqliteStore(db_path)
        document = json.loads(store.get("craftGameData"))
        store.close()
        assert "Steam" in document["discovered"]
        assert "Fire essence" in document["discovered"]
    print("✓ CLI combine test passed\n")


def test_export_import_reset():
    print("\n" + "="*70)
    print("TEST 2: CLI Export, Reset And Import")
    print("="*70)

    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = str(Path(tmpdir) / "craft.db")
        save_path = str(Path(tmpdir) / "save.json")
        bad_path = Path(tmpdir) / "bad.json"
        bad_path.write_text('{"version": "2.0"}')

        _run(db_path, "combine", "Earth", "Earth")
        assert _run(db_path, "export", "-o", save_path) == 0
        assert _run(db_path, "reset", "--yes") == 0
        assert _run(db_path, "import", str(bad_path)) == 1
        assert _run(db_path, "import", str(Path(tmpdir) / "missing.json")) == 1
        assert _run(db_path, "import", save_path) == 0

        store = SqliteStore(db_path)
        document = json.loads(store.get("craftGameData"))
        store.close()
        assert "Mountain" in document["discovered"]
    print("✓ CLI export/import test passed\n")


def run_all_tests():
    tests = [
        test_combine_and_list,
        test_export_import_reset,
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
