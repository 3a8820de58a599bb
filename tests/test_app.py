"""Tests for the interactive handlers in app.py."""

import app
from config.config_loader import DEFAULT_CONFIG
from simulator.renderer import frame_size


def small_config(tmp_path):
    return dict(
        DEFAULT_CONFIG,
        width=8,
        height=4,
        states=2,
        symbols=3,
        reset_steps=100,
        picture_steps=10,
        seed=3,
        output_directory=str(tmp_path / "logs"),
    )


def answer_prompts(monkeypatch, output, frames):
    monkeypatch.setattr(app.Prompt, "ask", lambda *args, **kwargs: output)
    monkeypatch.setattr(app.IntPrompt, "ask", lambda *args, **kwargs: frames)
    monkeypatch.setattr(app.Confirm, "ask", lambda *args, **kwargs: True)


class TestHandleStream:
    def test_writes_requested_frames(self, tmp_path, monkeypatch) -> None:
        out = tmp_path / "out.rgb"
        answer_prompts(monkeypatch, str(out), 2)
        app.handle_stream(small_config(tmp_path))
        assert out.stat().st_size == 2 * frame_size(8, 4)

    def test_output_error_is_reported(self, tmp_path, monkeypatch, capsys) -> None:
        answer_prompts(monkeypatch, str(tmp_path / "missing_dir" / "out.rgb"), 2)
        app.handle_stream(small_config(tmp_path))
        assert "Output error" in capsys.readouterr().err

    def test_config_error_is_reported(self, tmp_path, monkeypatch, capsys) -> None:
        answer_prompts(monkeypatch, str(tmp_path / "out.rgb"), -1)
        app.handle_stream(small_config(tmp_path))
        assert "Configuration error" in capsys.readouterr().err
