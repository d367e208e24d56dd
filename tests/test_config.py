from __future__ import annotations

import pytest
from pydantic import ValidationError

from github_connections.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in ("GITHUB_TOKEN", "GITHUB_API_URL", "GITHUB_GRAPHQL_URL", "BATCH_SIZE", "PAGE_SIZE"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.github_api_url == "https://api.github.com"
    assert settings.github_graphql_url == "https://api.github.com/graphql"
    assert settings.batch_size == 25
    assert settings.page_size == 100
    assert settings.token_value() is None


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "  ghp_secret  ")
    monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.test/api/v3/")
    monkeypatch.delenv("GITHUB_GRAPHQL_URL", raising=False)
    monkeypatch.setenv("BATCH_SIZE", "10")

    settings = Settings()

    assert settings.token_value() == "ghp_secret"
    assert "ghp_secret" not in repr(settings)
    assert settings.github_api_url == "https://ghe.example.test/api/v3"
    assert settings.github_graphql_url == "https://ghe.example.test/api/v3/graphql"
    assert settings.batch_size == 10


@pytest.mark.parametrize("field", ["batch_size", "page_size", "max_concurrency"])
def test_sizes_must_be_positive(field: str) -> None:
    with pytest.raises(ValidationError):
        Settings(**{field: 0})


def test_batch_size_upper_bound() -> None:
    with pytest.raises(ValidationError):
        Settings(batch_size=101)
