from __future__ import annotations

import pytest

import unwatch.cli as cli


def test_missing_token_exits_one_without_network(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)

    def no_client(*args, **kwargs):
        raise AssertionError("client must not be built without a token")

    monkeypatch.setattr(cli, "GitHubRESTClient", no_client)
    monkeypatch.setattr(cli, "UnwatchApp", no_client)

    assert cli.main() == 1
    assert "must set GITHUB_TOKEN" in capsys.readouterr().err


def test_main_wires_settings_into_client_and_app(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "abc")
    monkeypatch.setenv("UNWATCH_PAGE_SIZE", "50")
    monkeypatch.setattr(cli, "configure_logging", lambda settings: None)
    built = {}

    class FakeApp:
        return_code = 0

        def __init__(self, service):
            built["service"] = service

        def run(self):
            built["ran"] = True

    monkeypatch.setattr(cli, "UnwatchApp", FakeApp)

    assert cli.main() == 0
    assert built["ran"]
    assert built["service"].page_size == 50
    assert built["service"].github_client.session.headers["Authorization"] == "Bearer abc"
