import asyncio
from types import SimpleNamespace

import pytest
import requests

from analysis.errors import ExtractionError, FetchError
from ingestion.url_text_extractor import UrlTextExtractor, normalize_url


class FakeSession:
    def __init__(self, status_code=200, text="", error=None):
        self.status_code = status_code
        self.text = text
        self.error = error
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        if self.error:
            raise self.error
        return SimpleNamespace(status_code=self.status_code, text=self.text)


def test_normalize_url_adds_scheme_only_when_missing():
    assert normalize_url("example.com/terms") == "https://example.com/terms"
    assert normalize_url("  http://example.com  ") == "http://example.com"
    assert normalize_url("") == ""


def test_fetch_goes_through_reader_proxy_and_cleans_text():
    body = "Terms   of\tService\r\n\r\n\r\n\r\nSection 1.  " + "You agree to these terms. " * 5
    session = FakeSession(text=body)
    extractor = UrlTextExtractor(session=session, reader_base_url="https://reader.test/")

    text = asyncio.run(extractor.extract_from_url("example.com/tos"))

    assert session.requested == ["https://reader.test/https://example.com/tos"]
    assert text.startswith("Terms of Service\n\nSection 1.")
    assert "\n\n\n" not in text
    assert "  " not in text


def test_text_is_truncated_to_the_maximum_length():
    session = FakeSession(text="word " * 10_000)
    extractor = UrlTextExtractor(session=session)

    text = extractor.extract_from_url_sync("https://example.com")

    assert len(text) == UrlTextExtractor.MAX_TEXT_LENGTH


def test_short_text_raises_extraction_error():
    session = FakeSession(text="x" * 40)
    extractor = UrlTextExtractor(session=session)

    with pytest.raises(ExtractionError) as exc:
        extractor.extract_from_url_sync("https://example.com")

    assert exc.value.length == 40


def test_non_2xx_raises_fetch_error():
    extractor = UrlTextExtractor(session=FakeSession(status_code=404))

    with pytest.raises(FetchError) as exc:
        extractor.extract_from_url_sync("https://example.com/missing")

    assert exc.value.status_code == 404


def test_network_failure_raises_fetch_error_without_status():
    session = FakeSession(error=requests.ConnectionError("boom"))
    extractor = UrlTextExtractor(session=session)

    with pytest.raises(FetchError) as exc:
        extractor.extract_from_url_sync("https://example.com")

    assert exc.value.status_code is None


def test_blank_url_is_rejected_without_a_request():
    session = FakeSession(text="x" * 200)

    with pytest.raises(FetchError):
        UrlTextExtractor(session=session).extract_from_url_sync("   ")

    assert session.requested == []
