# Tests for the oauthflow CLI entry point.
# Created: 2026-10-18

from pathlib import Path
from unittest.mock import patch

import pytest

from oauthflow.__main__ import main
from oauthflow.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _quiet_logging():
    with patch("oauthflow.__main__.setup_logging"):
        yield


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert "oauthflow" in capsys.readouterr().out


def test_serve_passes_overrides():
    with patch("oauthflow.app.run_server") as run_server:
        code = main(
            [
                "--port",
                "8080",
                "--profiles",
                "profiles.json",
                "--public-host",
                "app.example.com",
                "--insecure",
            ]
        )

    assert code == 0
    settings = run_server.call_args.args[0]
    assert settings.profiles_file == Path("profiles.json")
    assert settings.host == "app.example.com"
    assert settings.secure is False
    assert run_server.call_args.kwargs == {"host": "127.0.0.1", "port": 8080}


def test_secure_flags_exclusive():
    with pytest.raises(SystemExit):
        main(["--secure", "--insecure"])


def test_configuration_error_exit_code():
    with patch("oauthflow.app.run_server", side_effect=ConfigurationError("bad profiles")):
        assert main(["--profiles", "missing.json"]) == 2
