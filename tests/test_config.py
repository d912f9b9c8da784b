import json
import logging

from seedvault.config import Settings, load_settings


def test_defaults(tmp_path):
    settings = load_settings(tmp_path / "missing.json", environ={})
    assert settings == Settings()
    assert settings.kdf_memory_cost == 65536
    assert settings.setup_ttl_seconds == 600
    assert settings.allow_password_only_unlock is True


def test_file_then_environment(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"setup_ttl_seconds": 120, "token_ttl_seconds": 60, "data_dir": str(tmp_path)}))

    settings = load_settings(path, environ={
        "SEEDVAULT_TOKEN_TTL_SECONDS": "30",
        "SEEDVAULT_ALLOW_PASSWORD_ONLY_UNLOCK": "false",
        "SEEDVAULT_TOKEN_SECRET": "s3cret",
    })
    assert settings.setup_ttl_seconds == 120
    assert settings.token_ttl_seconds == 30
    assert settings.allow_password_only_unlock is False
    assert settings.token_secret == "s3cret"
    assert settings.vault_path == tmp_path / "vault.json"


def test_secret_is_not_exposed(tmp_path):
    settings = load_settings(tmp_path / "none.json", environ={"SEEDVAULT_TOKEN_SECRET": "s3cret"})
    assert "s3cret" not in repr(settings)
    assert "token_secret" not in settings.to_dict()


def test_bad_values_are_ignored(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"kdf_time_cost": "lots", "unknown_key": 1}))
    with caplog.at_level(logging.WARNING):
        settings = load_settings(path, environ={})
    assert settings.kdf_time_cost == 3
    assert "unknown_key" in caplog.text


def test_malformed_file_is_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{oops")
    assert load_settings(path, environ={}) == Settings()


def test_default_vault_path_uses_app_home(isolated_home):
    assert Settings().vault_path == isolated_home / "vault.json"
