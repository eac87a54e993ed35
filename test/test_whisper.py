#!/usr/bin/env python3
"""测试 whisper 字幕生成（用 monkeypatch 替换 subprocess.run，不依赖真实 whisper）"""
import subprocess

import pytest

from shorts_wizard.errors import SubtitleGenerationFailed
from shorts_wizard.pipeline.processors.asr import whisper
from shorts_wizard.pipeline.processors.asr import generate_subtitle_file

SRT_TEXT = "1\n00:00:00,000 --> 00:00:01,500\nhello\n"


@pytest.fixture
def audio(tmp_path):
    path = tmp_path / "clip_extracted_audio.wav"
    path.write_bytes(b"RIFF")
    return path


def _fake_run(calls, *, returncode=0, stdout="", stderr="", write_srt=True):
    def run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        if write_srt and returncode == 0:
            out_dir = cmd[cmd.index("--output_dir") + 1]
            stem = cmd[1].rsplit("/", 1)[-1].rsplit(".", 1)[0]
            with open(f"{out_dir}/{stem}.srt", "w", encoding="utf-8") as f:
                f.write(SRT_TEXT)
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)
    return run


def test_success_returns_srt_path_and_builds_command(audio, tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(whisper.subprocess, "run", _fake_run(calls))
    out_dir = tmp_path / "subs"

    srt = generate_subtitle_file(str(audio), "base", str(out_dir), whisper_bin="whisper")

    assert srt == str(out_dir / "clip_extracted_audio.srt")
    assert out_dir.is_dir()
    cmd, kwargs = calls[0]
    assert cmd == [
        "whisper", str(audio),
        "--model", "base",
        "--output_dir", str(out_dir),
        "--output_format", "srt",
    ]
    assert kwargs["capture_output"] is True
    assert kwargs["text"] is True


def test_whisper_bin_from_environment(audio, tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(whisper.subprocess, "run", _fake_run(calls))
    monkeypatch.setenv("WHISPER_BIN", "/opt/whisper/bin/whisper")

    generate_subtitle_file(str(audio), "tiny.en", str(tmp_path))

    assert calls[0][0][0] == "/opt/whisper/bin/whisper"


def test_nonzero_exit_carries_diagnostics(audio, tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(
        whisper.subprocess, "run",
        _fake_run(calls, returncode=2, stdout="loading model", stderr="RuntimeError: bad model"),
    )

    with pytest.raises(SubtitleGenerationFailed) as exc:
        generate_subtitle_file(str(audio), "nope", str(tmp_path))

    assert "status 2" in str(exc.value)
    assert "RuntimeError: bad model" in exc.value.diagnostics
    assert "loading model" in exc.value.diagnostics


def test_missing_executable(audio, tmp_path, monkeypatch):
    def run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(whisper.subprocess, "run", run)

    with pytest.raises(SubtitleGenerationFailed) as exc:
        generate_subtitle_file(str(audio), "base", str(tmp_path), whisper_bin="no-such-whisper")
    assert "not found" in str(exc.value)


def test_missing_output_file(audio, tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(whisper.subprocess, "run", _fake_run(calls, write_srt=False, stderr="done?"))

    with pytest.raises(SubtitleGenerationFailed) as exc:
        generate_subtitle_file(str(audio), "base", str(tmp_path))
    assert "clip_extracted_audio.srt" in str(exc.value)


def test_missing_audio_never_spawns(tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(whisper.subprocess, "run", _fake_run(calls))

    with pytest.raises(SubtitleGenerationFailed):
        generate_subtitle_file(str(tmp_path / "none.wav"), "base", str(tmp_path))
    assert calls == []


def test_output_dir_that_is_a_file(audio, tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(whisper.subprocess, "run", _fake_run(calls))
    blocker = tmp_path / "blocker"
    blocker.write_text("x")

    with pytest.raises(NotADirectoryError):
        generate_subtitle_file(str(audio), "base", str(blocker))
    assert calls == []
