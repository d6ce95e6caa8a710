"""Tests for CLI commands using click.testing.CliRunner."""

import json

import pytest
from click.testing import CliRunner

from trayanim.cli import main
from trayanim.decoder import decode_gif


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def invoke(runner, data_dir):
    """Invoke the CLI against an isolated data directory."""

    def _invoke(*args):
        return runner.invoke(main, ["--data-dir", str(data_dir), *args])

    return _invoke


@pytest.fixture
def gif_file(tmp_path, animated_gif_bytes):
    path = tmp_path / "anim.gif"
    path.write_bytes(animated_gif_bytes)
    return path


class TestMainCLI:
    """Tests for main CLI group."""

    def test_main_help(self, runner):
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "TrayAnim" in result.output
        for command in ("info", "preview", "save", "profile", "reload", "play"):
            assert command in result.output

    def test_main_version(self, runner):
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "trayanim, version 0.1.0" in result.output

    def test_main_invalid_command(self, runner):
        result = runner.invoke(main, ["invalid-command"])

        assert result.exit_code == 2
        assert "No such command" in result.output


class TestSaveCommand:
    """Tests for save CLI command."""

    def test_save_gif(self, invoke, gif_file, data_dir):
        result = invoke("save", str(gif_file), "--crop", "0,0,16,16", "--size", "48")

        assert result.exit_code == 0, result.output
        assert "✅ Saved and applied successfully!" in result.output
        assert "Balanced | Size: 48px | Frames: 10/30" in result.output
        stream = decode_gif((data_dir / "tray-icon.processed").read_bytes())
        assert (stream.width, stream.height) == (16, 16)
        settings = json.loads((data_dir / "settings.json").read_text())
        assert settings == {"size": 48, "performanceMode": "balanced"}

    def test_save_invalid_crop(self, invoke, gif_file):
        result = invoke("save", str(gif_file), "--crop", "1,2,3")

        assert result.exit_code == 2
        assert "x,y,width,height" in result.output

    def test_save_size_out_of_range(self, invoke, gif_file):
        result = invoke("save", str(gif_file), "-c", "0,0,4,4", "-s", "200")

        assert result.exit_code == 2

    def test_save_failure_keeps_previous_asset(self, invoke, gif_file, tmp_path, data_dir):
        assert invoke("save", str(gif_file), "-c", "0,0,10,10").exit_code == 0
        before = (data_dir / "tray-icon.processed").read_bytes()

        result = invoke("save", str(tmp_path / "missing.gif"), "-c", "0,0,10,10")

        assert result.exit_code == 1
        assert "❌ Save failed" in result.output
        assert (data_dir / "tray-icon.processed").read_bytes() == before


class TestInfoCommand:
    """Tests for info CLI command."""

    def test_info_on_file(self, invoke, gif_file):
        result = invoke("info", str(gif_file))

        assert result.exit_code == 0, result.output
        assert "gif" in result.output
        assert "20x20" in result.output
        assert "infinite" in result.output

    def test_info_on_stored_asset(self, invoke, gif_file):
        invoke("save", str(gif_file), "-c", "0,0,12,8")

        result = invoke("info")

        assert result.exit_code == 0, result.output
        assert "12x8" in result.output

    def test_info_without_asset(self, invoke):
        result = invoke("info")

        assert result.exit_code == 1
        assert "❌ Info failed" in result.output


class TestProfileCommand:
    """Tests for profile CLI command."""

    def test_list_profiles(self, invoke):
        result = invoke("profile")

        assert result.exit_code == 0, result.output
        for name in ("light", "balanced", "performance"):
            assert name in result.output

    def test_select_profile(self, invoke, data_dir):
        result = invoke("profile", "light")

        assert result.exit_code == 0, result.output
        assert "✅ Performance mode set to Light" in result.output
        settings = json.loads((data_dir / "settings.json").read_text())
        assert settings["performanceMode"] == "light"

    def test_select_unknown_profile(self, invoke):
        result = invoke("profile", "turbo")

        assert result.exit_code == 2


class TestPlaybackCommands:
    """Tests for reload and play CLI commands."""

    def test_reload(self, invoke, gif_file):
        invoke("save", str(gif_file), "-c", "0,0,20,20", "-s", "24")

        result = invoke("reload")

        assert result.exit_code == 0, result.output
        assert "🔄 Balanced | Size: 24px | Frames: 10/30" in result.output

    def test_reload_without_asset(self, invoke):
        result = invoke("reload")

        assert result.exit_code == 1
        assert "❌ Reload failed" in result.output

    def test_play_simulates_ticks(self, invoke, gif_file):
        invoke("save", str(gif_file), "-c", "0,0,20,20")

        result = invoke("play", "--ticks", "12")

        assert result.exit_code == 0, result.output
        # 11 timer ticks after the first frame, 50 ms each
        assert "Simulated 550 ms" in result.output

    def test_play_static_asset(self, invoke, tmp_path, png_bytes):
        source = tmp_path / "still.png"
        source.write_bytes(png_bytes)
        invoke("save", str(source), "-c", "0,0,30,30")

        result = invoke("play", "-n", "5")

        assert result.exit_code == 0, result.output
        assert "Simulated 0 ms" in result.output


class TestPreviewCommand:
    """Tests for preview CLI command."""

    def test_preview_gif(self, invoke, gif_file, tmp_path):
        output = tmp_path / "out" / "preview.png"

        result = invoke("preview", str(gif_file), "-o", str(output))

        assert result.exit_code == 0, result.output
        assert "🔍 Detected format: gif" in result.output
        assert "📐 Canvas: 20x20" in result.output
        assert output.exists()

    def test_preview_unknown(self, invoke, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("not an image")

        result = invoke("preview", str(source), "-o", str(tmp_path / "p.png"))

        assert result.exit_code == 1
        assert "❌ Preview failed" in result.output
