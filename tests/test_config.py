from survey_import.core.config import Settings


def test_settings_fields_and_defaults(monkeypatch):
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)

    current = Settings(_env_file=None)

    assert set(Settings.model_fields) == {
        "log_level",
        "max_questions_per_file",
        "upload_max_file_size_mb",
        "mapping_fuzzy_threshold",
        "remote_preview_url",
        "remote_preview_timeout_seconds",
        "allowed_origins",
    }
    assert current.max_questions_per_file == 200
    assert current.mapping_fuzzy_threshold == 0.7


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("MAPPING_FUZZY_THRESHOLD", "0.9")
    monkeypatch.setenv("MAX_QUESTIONS_PER_FILE", "50")

    current = Settings(_env_file=None)

    assert current.mapping_fuzzy_threshold == 0.9
    assert current.max_questions_per_file == 50
