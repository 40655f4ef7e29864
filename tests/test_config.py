from airesume.config import DEFAULT_API_BASE_URL, load_settings


def test_defaults_without_settings_file(tmp_path, monkeypatch):
    monkeypatch.delenv("VITE_API_BASE_URL", raising=False)
    monkeypatch.delenv("AIRESUME_STORAGE_DIR", raising=False)
    settings = load_settings(tmp_path / "missing.yaml")
    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.request_timeout == 30.0
    assert settings.policy("job-recommendations").stale_time == 300
    assert settings.policy("candidate-search").stale_time == 120
    assert settings.policy("resumes").stale_time == 0


def test_yaml_settings_and_env_override(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "api_base_url: http://yaml.test/\n"
        "request_timeout: 5\n"
        "queries:\n"
        "  job-search:\n"
        "    stale_time: 10\n"
        "  resumes:\n"
        "    cache_time: 60\n"
    )
    monkeypatch.delenv("VITE_API_BASE_URL", raising=False)
    monkeypatch.setenv("AIRESUME_STORAGE_DIR", str(tmp_path / "store"))

    settings = load_settings(path)
    assert settings.api_base_url == "http://yaml.test"
    assert settings.request_timeout == 5.0
    assert settings.policy("job-search").stale_time == 10
    assert settings.policy("resumes").cache_time == 60
    assert settings.storage_dir == tmp_path / "store"

    monkeypatch.setenv("VITE_API_BASE_URL", "https://api.example.test")
    assert load_settings(path).api_base_url == "https://api.example.test"


def test_non_mapping_yaml_is_ignored(tmp_path, monkeypatch):
    monkeypatch.delenv("VITE_API_BASE_URL", raising=False)
    path = tmp_path / "settings.yaml"
    path.write_text("- just\n- a list\n")
    assert load_settings(path).api_base_url == DEFAULT_API_BASE_URL
