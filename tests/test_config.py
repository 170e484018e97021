import pytest

from core.config import (DEFAULT_ENCODING, DEFAULT_MAX_FILE_SIZE_BYTES, DEFAULT_MAX_SNIPPET_CHARS,
                         ENV_DEFAULT_ENCODING, ENV_ENCODING_FALLBACK, ENV_MAX_FILE_SIZE_BYTES,
                         ENV_MAX_SNIPPET_CHARS, SearchOptions)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in (ENV_MAX_FILE_SIZE_BYTES, ENV_MAX_SNIPPET_CHARS, ENV_ENCODING_FALLBACK, ENV_DEFAULT_ENCODING):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    options = SearchOptions()

    assert options.max_file_size_bytes == DEFAULT_MAX_FILE_SIZE_BYTES == 1024 * 1024
    assert options.max_snippet_chars == DEFAULT_MAX_SNIPPET_CHARS == 256
    assert options.allow_encoding_fallback is False
    assert options.default_encoding == DEFAULT_ENCODING
    assert options.on_progress is None and options.on_warning is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_file_size_bytes": -1},
        {"max_snippet_chars": 0},
        {"default_encoding": "no-such-codec"},
    ],
)
def test_invalid_options_raise(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        SearchOptions(**kwargs)


def test_from_env_reads_overrides(monkeypatch) -> None:
    monkeypatch.setenv(ENV_MAX_FILE_SIZE_BYTES, "2048")
    monkeypatch.setenv(ENV_MAX_SNIPPET_CHARS, " 80 ")
    monkeypatch.setenv(ENV_ENCODING_FALLBACK, "yes")
    monkeypatch.setenv(ENV_DEFAULT_ENCODING, "cp1252")

    options = SearchOptions.from_env()

    assert options.max_file_size_bytes == 2048
    assert options.max_snippet_chars == 80
    assert options.allow_encoding_fallback is True
    assert options.default_encoding == "cp1252"


def test_from_env_explicit_values_win(monkeypatch) -> None:
    monkeypatch.setenv(ENV_ENCODING_FALLBACK, "1")

    assert SearchOptions.from_env(allow_encoding_fallback=False).allow_encoding_fallback is False
    assert SearchOptions.from_env().max_snippet_chars == DEFAULT_MAX_SNIPPET_CHARS


@pytest.mark.parametrize(
    "name, value",
    [
        (ENV_MAX_FILE_SIZE_BYTES, "lots"),
        (ENV_ENCODING_FALLBACK, "maybe"),
    ],
)
def test_from_env_rejects_bad_values(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        SearchOptions.from_env()
