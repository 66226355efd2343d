import subprocess

import pytest

from archival_transcoder.domain.exceptions import ToolNotFoundError
from archival_transcoder.utils import tool_locator as tool_locator_module
from archival_transcoder.utils.tool_locator import ToolLocator, tool_version


@pytest.fixture(autouse=True)
def clear_version_cache():
    tool_version.cache_clear()
    yield
    tool_version.cache_clear()


def make_tool_dir(tmp_path, *tools):
    tool_dir = tmp_path / "bin"
    tool_dir.mkdir()
    for tool in tools:
        (tool_dir / ToolLocator.executable_name(tool)).write_text("")
    return tool_dir


def test_configured_directory_wins(tmp_path, monkeypatch):
    tool_dir = make_tool_dir(tmp_path, "ffmpeg", "ffprobe")
    monkeypatch.setattr(tool_locator_module.shutil, "which", lambda tool: f"/usr/bin/{tool}")

    tools = ToolLocator(tool_dir)

    assert tools.ffmpeg == str(tool_dir / ToolLocator.executable_name("ffmpeg"))
    assert tools.ffprobe == str(tool_dir / ToolLocator.executable_name("ffprobe"))


def test_falls_back_to_path_when_missing_from_directory(tmp_path, monkeypatch):
    tool_dir = make_tool_dir(tmp_path, "ffmpeg")
    monkeypatch.setattr(tool_locator_module.shutil, "which", lambda tool: f"/usr/bin/{tool}")

    tools = ToolLocator(tool_dir)

    assert tools.ffprobe == "/usr/bin/ffprobe"


def test_missing_tool_raises(monkeypatch):
    monkeypatch.setattr(tool_locator_module.shutil, "which", lambda tool: None)

    with pytest.raises(ToolNotFoundError, match="ffprobe"):
        ToolLocator().resolve("ffprobe")


def test_tool_version_reads_first_line(monkeypatch):
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 0, stdout="ffmpeg version 7.1\nbuilt with gcc\n", stderr="")

    monkeypatch.setattr(tool_locator_module.subprocess, "run", fake_run)

    assert tool_version("ffmpeg") == "ffmpeg version 7.1"


def test_tool_version_none_when_not_runnable(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise PermissionError("not executable")

    monkeypatch.setattr(tool_locator_module.subprocess, "run", fake_run)

    assert tool_version("/bin/ffmpeg") is None


def test_verify_rejects_tool_that_does_not_run(monkeypatch):
    monkeypatch.setattr(tool_locator_module.shutil, "which", lambda tool: f"/usr/bin/{tool}")
    monkeypatch.setattr(tool_locator_module, "tool_version", lambda executable: None)

    with pytest.raises(ToolNotFoundError):
        ToolLocator().verify()


def test_verify_accepts_working_tools(monkeypatch):
    monkeypatch.setattr(tool_locator_module.shutil, "which", lambda tool: f"/usr/bin/{tool}")
    monkeypatch.setattr(tool_locator_module, "tool_version", lambda executable: "version 7.1")

    ToolLocator().verify()
