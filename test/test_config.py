#!/usr/bin/env python3
"""测试配置：dataclass 校验、JSON 读写、.env 加载"""
import json
import os

import pytest

from shorts_wizard.config import AppConfig, SubtitleConfig, VideoConfig, load_env_file


def _config():
    return AppConfig(
        video=VideoConfig(input_path="in.mp4", output_path="out/short.mp4", short_duration_secs=30),
        subtitles=SubtitleConfig(
            whisper_model_path="base",
            font_path="fonts/Inter.ttf",
            font_size=32,
            font_color="#FFD700",
            subtitle_position_vertical_alignment="top",
            subtitle_position_horizontal_alignment="left",
        ),
    )


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "cfg" / "short.json"
    config = _config()
    config.save_to_file(path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["video"]["short_duration_secs"] == 30
    assert data["subtitles"]["font_color"] == "#FFD700"
    assert AppConfig.load_from_file(path) == config
    assert not (path.parent / ".short.json.tmp").exists()


def test_unknown_key_is_rejected():
    data = _config().to_dict()
    data["subtitles"]["font_weight"] = "bold"
    with pytest.raises(ValueError, match="font_weight"):
        AppConfig.from_dict(data)


def test_missing_section_is_rejected():
    data = _config().to_dict()
    del data["subtitles"]
    with pytest.raises(ValueError, match="subtitles"):
        AppConfig.from_dict(data)


def test_missing_required_key_is_rejected():
    data = _config().to_dict()
    del data["video"]["input_path"]
    with pytest.raises(ValueError):
        AppConfig.from_dict(data)


def test_load_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        AppConfig.load_from_file(path)


@pytest.mark.parametrize("secs", [0, -5])
def test_duration_must_be_positive(secs):
    with pytest.raises(ValueError):
        VideoConfig(input_path="a.mp4", output_path="b.mp4", short_duration_secs=secs)


def test_subtitles_require_model_and_font(monkeypatch):
    monkeypatch.delenv("WHISPER_MODEL", raising=False)
    with pytest.raises(ValueError, match="whisper_model_path"):
        SubtitleConfig(font_path="a.ttf")
    with pytest.raises(ValueError, match="font_path"):
        SubtitleConfig(whisper_model_path="base")
    # 关闭字幕时不需要
    assert SubtitleConfig(use_subtitles=False).use_subtitles is False


def test_whisper_model_defaults_from_environment(monkeypatch):
    monkeypatch.setenv("WHISPER_MODEL", "small")
    assert SubtitleConfig(font_path="a.ttf").whisper_model_path == "small"
    assert SubtitleConfig(font_path="a.ttf", whisper_model_path="tiny.en").whisper_model_path == "tiny.en"


def test_default_app_config_has_subtitles_disabled():
    config = AppConfig(video=VideoConfig(input_path="a.mp4", output_path="b.mp4"))
    assert config.video.short_duration_secs == 60
    assert config.subtitles.use_subtitles is False


def test_load_env_file_does_not_override(tmp_path, monkeypatch):
    env = tmp_path / ".env"
    env.write_text("WHISPER_MODEL=medium\nWHISPER_BIN=/usr/local/bin/whisper\n", encoding="utf-8")
    monkeypatch.setenv("WHISPER_BIN", "already-set")
    monkeypatch.setenv("WHISPER_MODEL", "placeholder")
    monkeypatch.delenv("WHISPER_MODEL")

    load_env_file(env)

    assert os.environ["WHISPER_MODEL"] == "medium"
    assert os.environ["WHISPER_BIN"] == "already-set"


def test_load_env_file_missing_path_is_noop(tmp_path):
    load_env_file(tmp_path / "absent.env")
