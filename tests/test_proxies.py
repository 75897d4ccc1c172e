"""
Tests for the server-side API proxies: status and body mapping.
"""

from unittest.mock import MagicMock

import requests

from conftest import make_response
from services.empire import register_airdrop
from services.proxy import ProxyResponse
from services.twitter import fetch_user_info

BODY = {"tokenAddress": "0xToken", "airdropTree": {"format": "standard-v1"}}


class TestProxyResponse:
    def test_ok_and_error(self):
        assert ProxyResponse(200, {}).ok
        assert ProxyResponse(200, {}).error is None
        assert ProxyResponse(404, {"error": "nope"}).error == "nope"
        assert ProxyResponse(502).error == "HTTP 502"


class TestRegisterAirdrop:
    def test_missing_key_is_500(self, http):
        resp = register_airdrop(BODY, api_key="", session=http)
        assert resp.status == 500
        assert resp.body == {"error": "Empire API key is not configured"}
        http.post.assert_not_called()

    def test_missing_fields_is_400(self, http):
        resp = register_airdrop({"tokenAddress": "0xToken"}, api_key="k", session=http)
        assert resp.status == 400
        assert resp.body == {"error": "Missing required fields: tokenAddress, airdropTree"}

    def test_waits_then_posts(self, http):
        sleep = MagicMock()
        http.post.return_value = make_response(200, {"success": True})
        resp = register_airdrop(
            BODY, api_key="k", url="https://empire/api", delay_s=5, session=http, sleep=sleep
        )
        sleep.assert_called_once_with(5)
        assert resp.status == 200
        assert resp.body == {"success": True}
        args, kwargs = http.post.call_args
        assert args[0] == "https://empire/api"
        assert kwargs["headers"]["x-api-key"] == "k"
        assert kwargs["json"] == BODY

    def test_zero_delay_skips_sleep(self, http):
        sleep = MagicMock()
        http.post.return_value = make_response(200, {})
        register_airdrop(BODY, api_key="k", delay_s=0, session=http, sleep=sleep)
        sleep.assert_not_called()

    def test_upstream_failure_keeps_status(self, http):
        http.post.return_value = make_response(422, {"message": "bad tree"})
        resp = register_airdrop(BODY, api_key="k", delay_s=0, session=http)
        assert resp.status == 422
        assert resp.body == {
            "error": "Failed to register airdrop",
            "details": {"message": "bad tree"},
        }

    def test_upstream_text_details(self, http):
        http.post.return_value = make_response(503, ValueError("no json"), text="down")
        resp = register_airdrop(BODY, api_key="k", delay_s=0, session=http)
        assert resp.body["details"] == "down"

    def test_transport_error_is_500(self, http):
        http.post.side_effect = requests.ConnectionError("boom")
        resp = register_airdrop(BODY, api_key="k", delay_s=0, session=http)
        assert resp.status == 500
        assert resp.body == {"error": "boom"}


class TestFetchUserInfo:
    def test_username_required(self, http):
        resp = fetch_user_info("  ", api_key="k", session=http)
        assert resp.status == 400
        assert resp.body == {"error": "username query parameter is required"}

    def test_missing_key_is_500(self, http):
        resp = fetch_user_info("alice", api_key="", session=http)
        assert resp.status == 500
        assert resp.body == {"error": "Twitter API key not configured"}

    def test_success_wraps_data_and_forwards_username(self, http):
        http.get.return_value = make_response(200, {"data": {"userName": "alice"}})
        resp = fetch_user_info("@alice", api_key="k", url="https://tw/info", session=http)
        assert resp.status == 200
        assert resp.body == {"status": "success", "data": {"data": {"userName": "alice"}}}
        _, kwargs = http.get.call_args
        assert kwargs["headers"] == {"X-API-Key": "k"}
        assert kwargs["params"] == {"userName": "alice"}

    def test_upstream_failure(self, http):
        http.get.return_value = make_response(429, None, text="rate limited")
        resp = fetch_user_info("alice", api_key="k", session=http)
        assert resp.status == 429
        assert resp.body == {"error": "Failed to fetch user info from Twitter API"}

    def test_exception_is_500_with_details(self, http):
        http.get.side_effect = requests.Timeout("slow")
        resp = fetch_user_info("alice", api_key="k", session=http)
        assert resp.status == 500
        assert resp.body == {"error": "Failed to fetch Twitter user info", "details": "slow"}
