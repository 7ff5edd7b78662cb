"""
Tests for command dispatch (alltabs_images/commands.py) and CLI parsing (alltabs_images/cli.py)
"""
import asyncio
import json
import logging

import pytest
from conftest import FakeTabs

from alltabs_images import cli
from alltabs_images.commands import CommandDispatcher, UnknownCommandError, run_command
from alltabs_images.config import DEFAULT_FOLDER, HarvestConfig
from alltabs_images.models import ImageCandidate
from alltabs_images.orchestrator import DownloadOrchestrator


class BrokenTabs(FakeTabs):
    """Tab source whose enumeration itself fails"""

    async def list_tabs(self):
        raise RuntimeError("browser went away")


def _dispatch(dispatcher, command, **kwargs):
    return asyncio.run(dispatcher.dispatch(command, **kwargs))


class TestDispatcher:
    """Test the four commands"""

    def test_download_reports_ok_despite_tab_failure(self, folders, downloads, scan_error):
        tabs = FakeTabs([
            ("https://one.test/", [ImageCandidate("https://cdn.test/1.jpg", 1)]),
            ("https://two.test/", scan_error),
            ("https://three.test/", [ImageCandidate("https://cdn.test/3.jpg", 1)]),
        ])
        dispatcher = CommandDispatcher(DownloadOrchestrator(tabs, downloads, folders), folders)
        assert _dispatch(dispatcher, "download") == {"ok": True}
        assert len(downloads.submitted) == 2

    def test_download_largest(self, folders, downloads):
        tabs = FakeTabs([
            ("https://one.test/", [
                ImageCandidate("https://cdn.test/small.jpg", 100),
                ImageCandidate("https://cdn.test/tiny.jpg", 50),
                ImageCandidate("https://cdn.test/big.jpg", 900),
            ]),
        ])
        dispatcher = CommandDispatcher(DownloadOrchestrator(tabs, downloads, folders), folders)
        assert _dispatch(dispatcher, "download-largest") == {"ok": True}
        assert [url for url, _, _ in downloads.submitted] == ["https://cdn.test/big.jpg"]

    def test_unhandled_failure_reports_not_ok(self, folders, downloads):
        dispatcher = CommandDispatcher(DownloadOrchestrator(BrokenTabs([]), downloads, folders), folders)
        assert _dispatch(dispatcher, "download") == {"ok": False}

    def test_folder_commands(self, folders):
        dispatcher = CommandDispatcher(None, folders)
        assert _dispatch(dispatcher, "get-folder") == {"folder": DEFAULT_FOLDER}
        assert _dispatch(dispatcher, "set-folder", folder="Holiday") == {"ok": True, "folder": "Holiday"}
        assert _dispatch(dispatcher, "get-folder") == {"folder": "Holiday"}

    def test_unknown_command(self, folders):
        with pytest.raises(UnknownCommandError):
            _dispatch(CommandDispatcher(None, folders), "delete-everything")


class TestRunCommand:
    """Test folder commands end to end without a browser"""

    def test_set_and_get_folder(self, tmp_path):
        config = HarvestConfig(settings_path=tmp_path / "settings.json", downloads_root=tmp_path)
        assert asyncio.run(run_command("set-folder", config, folder="Maps")) == {"ok": True, "folder": "Maps"}
        assert asyncio.run(run_command("get-folder", config)) == {"folder": "Maps"}

    def test_unknown_command(self, tmp_path):
        config = HarvestConfig(settings_path=tmp_path / "settings.json", downloads_root=tmp_path)
        with pytest.raises(UnknownCommandError):
            asyncio.run(run_command("nope", config))


class TestCli:
    """Test argument parsing and folder commands from the command line"""

    def test_download_arguments(self, tmp_path):
        args = cli.parse_args([
            "download-largest",
            "--launch", "https://a.test/", "https://b.test/",
            "--downloads-dir", str(tmp_path),
            "--settings-file", str(tmp_path / "s.json"),
        ])
        config = cli._build_config(args)
        assert args.command == "download-largest"
        assert args.launch == ["https://a.test/", "https://b.test/"]
        assert config.downloads_root == tmp_path.resolve()
        assert config.settings_path == tmp_path / "s.json"

    def test_get_folder_prints_json(self, tmp_path, capsys):
        settings = tmp_path / "s.json"
        assert cli.main(["set-folder", "Art", "--settings-file", str(settings)]) == 0
        assert cli.main(["get-folder", "--settings-file", str(settings)]) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert json.loads(lines[-1]) == {"folder": "Art"}

    def test_logging_left_usable_after_cli_run(self):
        """Handlers installed by an earlier cli.main call must not linger on a closed stream"""
        for handler in logging.getLogger().handlers:
            stream = getattr(handler, "stream", None)
            assert stream is None or not getattr(stream, "closed", False)

    def test_env_config(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ALLTABS_CDP_ENDPOINT", "http://127.0.0.1:9333")
        monkeypatch.setenv("ALLTABS_DOWNLOADS_DIR", str(tmp_path))
        monkeypatch.setenv("ALLTABS_SETTINGS_FILE", str(tmp_path / "s.json"))
        config = HarvestConfig.from_env()
        assert config.cdp_endpoint == "http://127.0.0.1:9333"
        assert config.downloads_root == tmp_path
        assert config.settings_path == tmp_path / "s.json"
