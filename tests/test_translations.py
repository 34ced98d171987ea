import json
from pathlib import Path

import pytest

from memos_wox.utils.response_manager import ALL_KEYS

ROOT = Path(__file__).resolve().parent.parent
LANG_FILES = sorted((ROOT / "lang").glob("*.json"))


def test_language_files_exist():
    assert {path.stem for path in LANG_FILES} >= {"en_US", "zh_CN"}


@pytest.mark.parametrize("path", LANG_FILES, ids=lambda path: path.stem)
def test_every_message_key_is_translated(path):
    translations = json.loads(path.read_text(encoding="utf-8"))
    missing = [key for key in ALL_KEYS if not translations.get(key[len("i18n:"):], "").strip()]
    assert missing == []


@pytest.mark.parametrize("path", LANG_FILES, ids=lambda path: path.stem)
def test_manifest_keys_are_translated(path):
    manifest = json.loads((ROOT / "plugin.json").read_text(encoding="utf-8"))
    translations = json.loads(path.read_text(encoding="utf-8"))
    referenced = [value[len("i18n:"):] for value in _strings(manifest) if value.startswith("i18n:")]
    assert [key for key in referenced if key not in translations] == []


def _strings(value):
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from _strings(item)
    elif isinstance(value, list):
        for item in value:
            yield from _strings(item)
