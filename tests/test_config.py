import pytest

from config import DEFAULT_MODEL, load_settings


def test_defaults():
    settings = load_settings({})
    assert settings.port == 5000
    assert settings.debug is False
    assert settings.log_level == "INFO"
    assert settings.anthropic_api_key is None
    assert settings.model == DEFAULT_MODEL
    assert settings.page_size == "A4"


def test_environment_overrides():
    settings = load_settings({
        "PORT": "8080",
        "FLASK_DEBUG": "true",
        "LOG_LEVEL": "debug",
        "ANTHROPIC_API_KEY": "sk-test",
        "CHEATSHEET_PAGE_SIZE": "letter",
        "CHEATSHEET_FOOTER": "Mixing 101",
    })
    assert settings.port == 8080
    assert settings.debug is True
    assert settings.log_level == "DEBUG"
    assert settings.anthropic_api_key == "sk-test"
    assert settings.page_size == "letter"
    assert settings.footer == "Mixing 101"


def test_unknown_page_size_is_rejected():
    with pytest.raises(ValueError):
        load_settings({"CHEATSHEET_PAGE_SIZE": "A3"})
