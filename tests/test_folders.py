"""
Tests for settings persistence and folder resolution (alltabs_images/storage.py, folders.py)
"""
from alltabs_images.config import DEFAULT_FOLDER, PROMPTS, STORAGE_KEY
from alltabs_images.folders import FolderResolver, console_prompt
from alltabs_images.storage import SettingsStore


class TestSettingsStore:
    """Test the JSON key-value store"""

    def test_missing_file_reads_default(self, store):
        assert store.get(STORAGE_KEY) is None
        assert store.get(STORAGE_KEY, "x") == "x"

    def test_set_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        SettingsStore(path).set(STORAGE_KEY, "Wallpapers")
        assert SettingsStore(path).get(STORAGE_KEY) == "Wallpapers"

    def test_set_keeps_other_keys(self, store):
        store.set("other", 1)
        store.set(STORAGE_KEY, "A")
        assert store.get("other") == 1

    def test_corrupt_file_treated_as_empty(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        store = SettingsStore(path)
        assert store.get(STORAGE_KEY) is None
        store.set(STORAGE_KEY, "B")
        assert store.get(STORAGE_KEY) == "B"


class TestFolderResolver:
    """Test folder lookup, prompting and changes"""

    def test_resolve_prompts_once_and_persists(self, store):
        asked = []

        def prompt(message, default):
            asked.append((message, default))
            return "  Cats  "

        resolver = FolderResolver(store, prompt)
        assert resolver.resolve() == "Cats"
        assert resolver.resolve() == "Cats"
        assert asked == [(PROMPTS["folder"], DEFAULT_FOLDER)]
        assert store.get(STORAGE_KEY) == "Cats"

    def test_resolve_empty_answer_uses_default(self, store):
        resolver = FolderResolver(store, lambda message, default: "")
        assert resolver.resolve() == DEFAULT_FOLDER
        assert store.get(STORAGE_KEY) == DEFAULT_FOLDER

    def test_current_never_prompts(self, store):
        def prompt(message, default):
            raise AssertionError("should not prompt")

        resolver = FolderResolver(store, prompt)
        assert resolver.current() == DEFAULT_FOLDER
        store.set(STORAGE_KEY, "Dogs")
        assert resolver.current() == "Dogs"

    def test_change_with_explicit_value(self, folders, store):
        assert folders.change("Birds") == "Birds"
        assert store.get(STORAGE_KEY) == "Birds"

    def test_change_prompts_with_current(self, store):
        store.set(STORAGE_KEY, "Old")
        asked = []

        def prompt(message, default):
            asked.append((message, default))
            return "New"

        assert FolderResolver(store, prompt).change() == "New"
        assert asked == [(PROMPTS["new_folder"], "Old")]

    def test_change_cancelled_keeps_current(self, store):
        store.set(STORAGE_KEY, "Old")
        assert FolderResolver(store, lambda message, default: "").change() == "Old"
        assert store.get(STORAGE_KEY) == "Old"


class TestConsolePrompt:
    """Test the terminal prompt"""

    def test_trims_answer(self, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda text: "  Trips ")
        assert console_prompt("Folder", "X") == "Trips"

    def test_eof_is_empty(self, monkeypatch):
        def raise_eof(text):
            raise EOFError

        monkeypatch.setattr("builtins.input", raise_eof)
        assert console_prompt("Folder", "X") == ""
