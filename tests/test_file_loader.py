from unittest.mock import MagicMock, patch

import pytest
import requests

from errors import DocumentReadError
from file_loader import FileLoader


def test_local_file(tmp_path):
    path = tmp_path / "statement.CSV"
    path.write_bytes(b"Date,Description,Amount\n")
    assert FileLoader().load_bytes(str(path)) == (".csv", b"Date,Description,Amount\n")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        FileLoader().load_bytes(str(tmp_path / "nope.csv"))


def test_unsupported_extension(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    with pytest.raises(ValueError, match="Unsupported file type"):
        FileLoader().load_bytes(str(path))


def _response(content=b"data", content_type=""):
    response = MagicMock()
    response.content = content
    response.headers = {"Content-Type": content_type}
    return response


def test_download_uses_url_extension():
    with patch("file_loader.requests.get", return_value=_response(b"a,b")) as mock_get:
        result = FileLoader(timeout=12).load_bytes("https://bank.example.com/exports/october.csv")
    assert result == (".csv", b"a,b")
    mock_get.assert_called_once_with("https://bank.example.com/exports/october.csv", timeout=12)


def test_download_falls_back_to_content_type():
    response = _response(b"%PDF", "application/pdf; charset=binary")
    with patch("file_loader.requests.get", return_value=response):
        assert FileLoader().load_bytes("https://bank.example.com/download?id=7") == (".pdf", b"%PDF")


def test_download_errors_are_document_errors():
    with patch("file_loader.requests.get", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(DocumentReadError, match="failed to download"):
            FileLoader().load_bytes("http://bank.example.com/october.csv")


def test_http_error_status():
    response = _response()
    response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
    with patch("file_loader.requests.get", return_value=response):
        with pytest.raises(DocumentReadError):
            FileLoader().load_bytes("https://bank.example.com/october.csv")


def test_is_url():
    assert FileLoader.is_url("https://x.example/a.csv")
    assert not FileLoader.is_url("/tmp/a.csv")
