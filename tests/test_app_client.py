"""Tests for the OrderKuota mobile-app client."""

import base64
from datetime import date
from decimal import Decimal

import pytest
import requests

from orderkuota.clients.app import AppClient
from orderkuota.errors import ErrorCode, OrderKuotaError

from conftest import make_response

LOGIN_URL = "https://app.orderkuota.com/api/v2/login"
GET_URL = "https://app.orderkuota.com/api/v2/get"


@pytest.fixture
def client(credentials, test_settings, session):
    return AppClient(credentials, settings=test_settings, session=session)


@pytest.fixture
def authed_client(credentials, test_settings, session):
    return AppClient(credentials, settings=test_settings, session=session, token="2001:tok-abcdef")


class TestConstruction:
    """Tests for credential and token setup."""

    def test_only_username_and_password_required(self, test_settings, session):
        client = AppClient({"username": "budi", "password": "pw"}, settings=test_settings, session=session)
        assert client.is_config_valid()
        assert not client.has_token()

    def test_missing_password(self, test_settings, session):
        with pytest.raises(OrderKuotaError) as exc_info:
            AppClient({"username": "budi"}, settings=test_settings, session=session)
        assert exc_info.value.code == ErrorCode.MISSING_CONFIG

    def test_token_from_credentials(self, credentials, test_settings, session):
        client = AppClient(credentials, settings=test_settings, session=session, auth_token="stored")
        assert client.get_token_value() == "stored"

    def test_set_and_clear_token(self, client):
        client.set_token("  abc  ")
        assert client.token == "abc"
        assert client.has_token()
        client.clear_token()
        assert client.get_token_value() is None

    def test_empty_token_rejected(self, client):
        with pytest.raises(OrderKuotaError) as exc_info:
            client.set_token("  ")
        assert exc_info.value.code == ErrorCode.MISSING_TOKEN

    def test_config_masks_token(self, authed_client):
        config = authed_client.get_config()
        assert config == {"username": "budi", "token": "2001****"}


class TestRequestOtp:
    """Tests for the first login step."""

    def test_otp_sent(self, client, session):
        session.add(make_response(json_body={
            "success": True,
            "message": "OTP dikirim",
            "results": {"otp": "email", "otp_value": "budi@example.com"},
        }))

        result = client.request_otp()

        assert result.status == "success"
        assert result.email == "budi@example.com"
        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == LOGIN_URL
        assert call["data"]["username"] == "budi"
        assert call["data"]["password"] == "s3cret!"
        assert call["data"]["app_version_code"] == "250327"

    def test_refused(self, client, session):
        session.add(make_response(json_body={"success": False, "message": "Password salah"}))
        result = client.request_otp()
        assert result.status == "failed"
        assert result.message == "Password salah"

    def test_token_without_otp(self, client, session):
        session.add(make_response(json_body={"success": True, "results": {"token": "2001:direct"}}))
        result = client.request_otp()
        assert result.status == "success"
        assert client.get_token_value() == "2001:direct"

    def test_network_error(self, client, session):
        session.add(requests.ConnectionError("down"))
        with pytest.raises(OrderKuotaError) as exc_info:
            client.request_otp()
        assert exc_info.value.code == ErrorCode.OTP_REQUEST_FAILED

    def test_non_json(self, client, session):
        session.add(make_response(text="Bad Gateway"))
        with pytest.raises(OrderKuotaError) as exc_info:
            client.request_otp()
        assert exc_info.value.code == ErrorCode.INVALID_RESPONSE


class TestGetToken:
    """Tests for exchanging an OTP for a token."""

    def test_success(self, client, session):
        session.add(make_response(json_body={
            "success": True,
            "results": {
                "token": "2001:tok-abcdef",
                "id": 2001,
                "name": "Budi Santoso",
                "username": "budi",
                "balance": "10.000",
            },
        }))

        result = client.get_token("123456")

        assert result.status == "success"
        assert result.token == "2001:tok-abcdef"
        assert result.user_id == "2001"
        assert result.balance == Decimal(10000)
        assert client.has_token()
        assert session.calls[0]["data"]["password"] == "123456"

    def test_wrong_otp(self, client, session):
        session.add(make_response(json_body={"success": False, "message": "OTP salah"}))
        result = client.get_token("000000")
        assert result.status == "failed"
        assert result.token is None
        assert not client.has_token()

    def test_empty_otp(self, client, session):
        with pytest.raises(OrderKuotaError) as exc_info:
            client.get_token(" ")
        assert exc_info.value.code == ErrorCode.TOKEN_REQUEST_FAILED
        assert session.calls == []

    def test_http_error(self, client, session):
        session.add(make_response(status=429, json_body={"message": "Terlalu banyak permintaan"}))
        with pytest.raises(OrderKuotaError) as exc_info:
            client.get_token("123456")
        assert exc_info.value.code == ErrorCode.TOKEN_REQUEST_FAILED
        assert exc_info.value.status == 429


class TestQrisHistory:
    """Tests for app QRIS history."""

    def test_requires_token(self, client, session):
        with pytest.raises(OrderKuotaError) as exc_info:
            client.get_qris_history()
        assert exc_info.value.code == ErrorCode.MISSING_TOKEN
        assert session.calls == []

    def test_history_page(self, authed_client, session):
        session.add(make_response(json_body={
            "success": True,
            "qris_history": {
                "success": True,
                "results": [{
                    "id": 1,
                    "debet": "0",
                    "kredit": "15.000",
                    "saldo_akhir": "100.000",
                    "keterangan": "NOBU / BUDI",
                    "tanggal": "01/05/2024 10:00",
                    "status": "IN",
                    "fee": "",
                    "brand": {"name": "DANA"},
                }],
                "page": 2,
                "pages": 3,
            },
        }))

        result = authed_client.get_qris_history(page=2, per_page=10, date_from=date(2024, 5, 1))

        assert result.success
        assert result.page == 2
        assert result.pages == 3
        tx = result.results[0]
        assert tx.kredit == Decimal(15000)
        assert tx.saldo_akhir == Decimal(100000)
        assert tx.fee is None
        assert tx.is_credit

        call = session.calls[0]
        assert call["url"] == GET_URL
        form = call["data"]
        assert form["auth_username"] == "budi"
        assert form["auth_token"] == "2001:tok-abcdef"
        assert form["requests[qris_history][page]"] == "2"
        assert form["requests[qris_history][jumlah]"] == "10"
        assert form["requests[qris_history][dari_tanggal]"] == "2024-05-01"
        assert "requests[qris_history][ke_tanggal]" not in form
        assert form["request_time"].isdigit()

    def test_missing_section(self, authed_client, session):
        session.add(make_response(json_body={"success": False, "message": "Token expired"}))
        result = authed_client.get_qris_history()
        assert not result.success
        assert result.message == "Token expired"
        assert result.results == []

    def test_http_error_masks_token(self, authed_client, session):
        session.add(make_response(status=401, text="invalid token 2001:tok-abcdef"))
        with pytest.raises(OrderKuotaError) as exc_info:
            authed_client.get_qris_history()
        assert exc_info.value.code == ErrorCode.QRIS_FETCH_FAILED
        assert exc_info.value.status == 401
        assert "tok-abcdef" not in str(exc_info.value)


class TestMenuAndBalance:
    """Tests for the account menu, balance and QRIS Ajaib."""

    def test_fetch_menu(self, authed_client, session):
        session.add(make_response(json_body={
            "success": True,
            "account": {"success": True, "results": {"balance": "50.000"}},
            "qris_menu": {"success": True, "results": {"qris_balance": "25.000"}},
        }))

        menu = authed_client.fetch_qris_menu()

        assert menu.section("account").success
        assert menu.section("missing") is None
        form = session.calls[0]["data"]
        assert form["requests[0]"] == "account"
        assert form["requests[1]"] == "qris_menu"

    def test_balance(self, authed_client, session):
        session.add(make_response(json_body={
            "success": True,
            "account": {"success": True, "results": {"balance": "50.000", "qris_balance": "25.000"}},
        }))
        result = authed_client.check_balance()
        assert result.success
        assert result.balance == Decimal(50000)
        assert result.qris_balance == Decimal(25000)

    def test_qris_balance_from_menu(self, authed_client, session):
        session.add(make_response(json_body={
            "success": True,
            "account": {"success": True, "results": {"balance": 1000}},
            "qris_menu": {"success": True, "results": {"qris_balance": 750}},
        }))
        assert authed_client.check_balance().qris_balance == Decimal(750)

    def test_balance_refused(self, authed_client, session):
        session.add(make_response(json_body={
            "success": True,
            "account": {"success": False, "message": "Sesi habis"},
        }))
        result = authed_client.check_balance()
        assert not result.success
        assert result.message == "Sesi habis"

    def test_balance_network_error(self, authed_client, session):
        session.add(requests.Timeout("slow"))
        with pytest.raises(OrderKuotaError) as exc_info:
            authed_client.check_balance()
        assert exc_info.value.code == ErrorCode.BALANCE_CHECK_FAILED

    def test_qris_ajaib(self, authed_client, session):
        session.add(make_response(json_body={
            "success": True,
            "qris_ajaib": {"success": True, "results": {"qr_string": "00020101021254", "amount": 10000}},
        }))

        result = authed_client.generate_qris_ajaib(10000.9)

        assert result.success
        assert result.qr_string == "00020101021254"
        assert result.amount == Decimal(10000)
        assert session.calls[0]["data"]["requests[qris_ajaib][desired_nominal]"] == "10000"

    def test_qris_ajaib_without_string(self, authed_client, session):
        session.add(make_response(json_body={
            "success": True,
            "qris_ajaib": {"success": True, "results": {}},
        }))
        result = authed_client.generate_qris_ajaib(5000)
        assert not result.success
        assert result.amount == Decimal(5000)

    def test_qris_ajaib_invalid_amount(self, authed_client, session):
        with pytest.raises(OrderKuotaError) as exc_info:
            authed_client.generate_qris_ajaib(0)
        assert exc_info.value.code == ErrorCode.INVALID_AMOUNT
        assert session.calls == []

    def test_qr_image(self, authed_client, static_qris):
        png = base64.b64decode(authed_client.generate_qr_image(static_qris, {"width": 64}))
        assert png.startswith(b"\x89PNG")
