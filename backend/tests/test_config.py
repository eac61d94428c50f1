from __future__ import annotations

from course_wizard.config import Settings


def test_defaults_match_evaluation_parameters(monkeypatch) -> None:
    for name in (
        "COURSE_WIZARD_MODEL",
        "COURSE_WIZARD_EVAL_TEMPERATURE",
        "COURSE_WIZARD_EVAL_MAX_TOKENS",
        "COURSE_WIZARD_GENERATION_TEMPERATURE",
        "COURSE_WIZARD_GENERATION_MAX_TOKENS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.model == "gpt-4o-mini"
    assert settings.eval_temperature == 0.3
    assert settings.eval_max_tokens == 2000
    assert settings.generation_temperature == 0.7
    assert settings.generation_max_tokens == 8000
    assert settings.state_path is None


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("COURSE_WIZARD_MODEL", "gpt-4o")
    monkeypatch.setenv("COURSE_WIZARD_EVAL_MAX_TOKENS", "1200")
    monkeypatch.setenv("COURSE_WIZARD_CORS_ORIGINS", "http://localhost:5173, https://canvas.example.edu")

    settings = Settings()

    assert settings.model == "gpt-4o"
    assert settings.eval_max_tokens == 1200
    assert settings.cors_origins == ["http://localhost:5173", "https://canvas.example.edu"]


def test_blank_cors_origins_allow_everything(monkeypatch) -> None:
    monkeypatch.setenv("COURSE_WIZARD_CORS_ORIGINS", " , ")

    assert Settings().cors_origins == ["*"]
