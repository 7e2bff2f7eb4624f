"""Shared fixtures: a scripted requests session and sample QRIS payloads."""

import json

import pytest
import requests

from orderkuota.config import HttpConfig, Settings
from orderkuota.models.credentials import OrderKuotaCredentials
from orderkuota.qris.crc import checksum


def tlv(tag: str, value: str) -> str:
    return f"{tag}{len(value):02d}{value}"


def build_static_qris() -> str:
    """A static QRIS in the shape Indonesian acquirers print on stickers."""
    merchant_account = (
        tlv("00", "COM.GO-JEK.WWW")
        + tlv("01", "936009140000000001")
        + tlv("02", "G000000001")
        + tlv("03", "UMI")
    )
    qris_account = (
        tlv("00", "ID.CO.QRIS.WWW")
        + tlv("02", "ID1020000000001")
        + tlv("03", "UMI")
    )
    body = (
        tlv("00", "01")
        + tlv("01", "11")
        + tlv("26", merchant_account)
        + tlv("51", qris_account)
        + tlv("52", "5812")
        + tlv("53", "360")
        + tlv("58", "ID")
        + tlv("59", "TOKO MAJU")
        + tlv("60", "JAKARTA")
        + tlv("61", "12345")
        + tlv("62", tlv("07", "A01"))
        + "6304"
    )
    return body + checksum(body)


STATIC_QRIS = build_static_qris()


def make_response(status: int = 200, text: str | None = None, json_body=None) -> requests.Response:
    """Build a real requests.Response with the given body."""
    response = requests.Response()
    response.status_code = status
    response.reason = "OK" if status < 400 else "Error"
    response.encoding = "utf-8"
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
        response.headers["Content-Type"] = "text/plain"
    return response


class FakeSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self, *items):
        self.queue = list(items)
        self.calls = []
        self.headers = {}
        self.closed = False

    def add(self, item):
        self.queue.append(item)
        return self

    def request(self, method, url, data=None, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, "data": data, "timeout": timeout})
        if not self.queue:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        if item.url is None:
            item.url = url
        return item

    def close(self):
        self.closed = True


@pytest.fixture
def test_settings():
    """Settings without retries or env-file lookups."""
    return Settings(http=HttpConfig(max_retries=1), _env_file=None)


@pytest.fixture
def credentials():
    return OrderKuotaCredentials(
        username="budi",
        password="s3cret!",
        userid="OK123456",
        apikey="apikey-9f8e7d",
        pin="908172",
        base_qr_string=STATIC_QRIS,
    )


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def static_qris():
    return STATIC_QRIS
