from unittest import mock

import pytest

import cli


@pytest.fixture()
def tls_files(tmp_path):
    cert = tmp_path / "tls.crt"
    key = tmp_path / "tls.key"
    cert.write_text("cert")
    key.write_text("key")
    return str(cert), str(key)


def test_missing_tls_files(tmp_path):
    res = cli.main(
        ["--tls-cert", str(tmp_path / "nope.crt"), "--tls-key", str(tmp_path / "nope.key")]
    )
    assert res == 1


def test_runs_with_tls(tls_files):
    cert, key = tls_files
    with mock.patch("flask.Flask.run") as mock_run:
        res = cli.main(["--tls-cert", cert, "--tls-key", key, "--port", "8443"])

    assert res == 0
    mock_run.assert_called_once_with(
        host="0.0.0.0", port=8443, ssl_context=(cert, key), threaded=True
    )


def test_listener_failure(tls_files):
    cert, key = tls_files
    with mock.patch("flask.Flask.run", side_effect=OSError("bad certificate")):
        res = cli.main(["--tls-cert", cert, "--tls-key", key])

    assert res == 1
