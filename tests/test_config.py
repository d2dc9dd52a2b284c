from student_records.core.config import PLACEHOLDER_PASSWORD, Settings, print_config


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


def test_defaults_are_placeholders(monkeypatch):
    """Without environment overrides the insecure fallback triple is used."""
    for name in ("DB_URL", "DB_USERNAME", "DB_PASSWORD"):
        monkeypatch.delenv(name, raising=False)

    settings = _settings()

    assert settings.DB_URL == "postgresql://localhost:5432/student_db"
    assert settings.DB_USERNAME == "postgres"
    assert settings.DB_PASSWORD == PLACEHOLDER_PASSWORD
    assert settings.uses_placeholder_credentials is True
    assert settings.DB_CONNECT_TIMEOUT == 10


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DB_URL", "postgresql://db.internal:6543/school")
    monkeypatch.setenv("DB_USERNAME", "registrar")
    monkeypatch.setenv("DB_PASSWORD", "s3cret")
    monkeypatch.setenv("DB_CONNECT_TIMEOUT", "3")

    settings = _settings()

    assert settings.DB_URL == "postgresql://db.internal:6543/school"
    assert settings.DB_USERNAME == "registrar"
    assert settings.DB_PASSWORD == "s3cret"
    assert settings.DB_CONNECT_TIMEOUT == 3
    assert settings.uses_placeholder_credentials is False


def test_blank_environment_values_fall_back(monkeypatch):
    monkeypatch.setenv("DB_URL", "   ")
    monkeypatch.setenv("DB_USERNAME", "")

    settings = _settings()

    assert settings.DB_URL == "postgresql://localhost:5432/student_db"
    assert settings.DB_USERNAME == "postgres"


def test_database_url_merges_credentials():
    settings = _settings(
        DB_URL="postgresql://db.internal:5432/school",
        DB_USERNAME="registrar",
        DB_PASSWORD="s3cret",
    )

    url = settings.get_database_url()

    assert url.username == "registrar"
    assert url.password == "s3cret"
    assert url.host == "db.internal"
    assert url.database == "school"


def test_sqlite_url_ignores_credentials(tmp_path):
    settings = _settings(DB_URL=f"sqlite:///{tmp_path / 'x.db'}", DB_USERNAME="someone")

    url = settings.get_database_url()

    assert url.username is None
    assert url.password is None
    assert url.database == str(tmp_path / "x.db")


def test_log_level_is_normalized():
    assert _settings(LOG_LEVEL=" debug ").LOG_LEVEL == "DEBUG"


def test_print_config_masks_password(capsys):
    print_config(_settings(DB_PASSWORD="hunter2"))

    out = capsys.readouterr().out
    assert "hunter2" not in out
    assert "*******" in out
