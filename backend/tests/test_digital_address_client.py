"""デジタルアドレスAPIクライアントのテスト"""
import pytest
import requests
from unittest.mock import Mock, patch

from backend.app.exceptions import DirectoryResponseError
from backend.app.utils.digital_address_client import (
    DigitalAddressClient,
    RemoteError,
    RemoteNotFound,
    RemoteRecord,
    RemoteUnavailable,
    normalize_postal_code,
    parse_search_payload,
)

BASE_URL = "https://da.example.test/api"
POST_TARGET = "backend.app.utils.digital_address_client.requests.post"


def make_response(status_code=200, body=None, json_error=False):
    """テスト用のレスポンスモック"""
    response = Mock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


class TestDigitalAddressClient:
    """DigitalAddressClientのテストクラス"""

    @pytest.fixture
    def client(self):
        return DigitalAddressClient(BASE_URL, search_path="/search/address", timeout=3.0)

    def test_request_shape(self, client):
        """POSTで1回だけ問い合わせる"""
        body = {"success": True, "data": {"postalCode": "163-8001", "address": "東京都新宿区西新宿二丁目8番1号"}}
        with patch(POST_TARGET, return_value=make_response(200, body)) as post:
            client.lookup("東京都新宿区西新宿2-8-1")

        post.assert_called_once()
        args, kwargs = post.call_args
        assert args[0] == "https://da.example.test/api/search/address"
        assert kwargs["json"] == {"digitalAddress": "東京都新宿区西新宿2-8-1"}
        assert kwargs["timeout"] == 3.0

    def test_success_envelope(self, client):
        """success/data形式の応答"""
        body = {
            "success": True,
            "data": {
                "postalCode": "163-8001",
                "address": "東京都新宿区西新宿二丁目8番1号",
                "digitalAddress": "別の値",
            },
        }
        with patch(POST_TARGET, return_value=make_response(200, body)):
            result = client.lookup("東京都新宿区西新宿2-8-1")

        assert result == RemoteRecord("163-8001", "東京都新宿区西新宿二丁目8番1号", "別の値")

    def test_flat_record_with_seven_digit_zip(self, client):
        """フラットな応答・7桁の郵便番号"""
        body = {"zipCode": "5300001", "fullAddress": "大阪府大阪市北区梅田一丁目1番1号"}
        with patch(POST_TARGET, return_value=make_response(200, body)):
            result = client.lookup("DA.OSAKA")

        assert isinstance(result, RemoteRecord)
        assert result.postal_code == "530-0001"
        assert result.digital_address is None

    def test_not_found_status(self, client):
        with patch(POST_TARGET, return_value=make_response(404, {"error": "not found"})):
            assert client.lookup("DA.X") == RemoteNotFound()

    def test_404_without_json_is_unavailable(self, client):
        """JSONのない404（HTMLのエラーページなど）は通信障害"""
        with patch(POST_TARGET, return_value=make_response(404, json_error=True)):
            assert client.lookup("東京都新宿区西新宿2-8-1") == RemoteUnavailable("http_404")

    @pytest.mark.parametrize("status", [200, 400, 404, 422])
    def test_not_found_code_any_status(self, client, status):
        """該当なしのエラーコードはステータスに関係なくRemoteNotFound"""
        body = {"success": False, "error": {"code": "NOT_FOUND", "message": "該当なし"}}
        with patch(POST_TARGET, return_value=make_response(status, body)):
            assert client.lookup("DA.X") == RemoteNotFound()

    def test_not_found_null_data(self, client):
        with patch(POST_TARGET, return_value=make_response(200, {"success": True, "data": None})):
            assert client.lookup("DA.X") == RemoteNotFound()

    def test_not_found_error_code(self, client):
        body = {"success": False, "error": {"code": "not_found", "message": "該当なし"}}
        with patch(POST_TARGET, return_value=make_response(200, body)):
            assert client.lookup("DA.X") == RemoteNotFound()

    def test_error_payload_in_success_status(self, client):
        body = {"success": False, "error": {"code": "INVALID_FORMAT", "message": "形式が不正です"}}
        with patch(POST_TARGET, return_value=make_response(200, body)):
            assert client.lookup("DA.X") == RemoteError("形式が不正です")

    def test_error_payload_in_error_status(self, client):
        """4xx/5xxでもエラーメッセージがあればRemoteError"""
        with patch(POST_TARGET, return_value=make_response(400, {"error": {"message": "bad request"}})):
            assert client.lookup("DA.X") == RemoteError("bad request")
        with patch(POST_TARGET, return_value=make_response(500, {"message": "internal"})):
            assert client.lookup("DA.X") == RemoteError("internal")

    def test_error_status_without_payload(self, client):
        """エラーメッセージのない5xxは通信障害"""
        with patch(POST_TARGET, return_value=make_response(500, json_error=True)):
            assert client.lookup("DA.X") == RemoteUnavailable("http_500")

    @pytest.mark.parametrize("status", [502, 503, 504])
    def test_gateway_errors_are_unavailable(self, client, status):
        with patch(POST_TARGET, return_value=make_response(status, {"error": "maintenance"})):
            assert client.lookup("DA.X") == RemoteUnavailable(f"http_{status}")

    def test_connection_error(self, client):
        with patch(POST_TARGET, side_effect=requests.ConnectionError("refused")):
            assert client.lookup("DA.X") == RemoteUnavailable("ConnectionError")

    def test_timeout(self, client):
        with patch(POST_TARGET, side_effect=requests.Timeout("slow")):
            assert client.lookup("DA.X") == RemoteUnavailable("Timeout")

    def test_malformed_json(self, client):
        with patch(POST_TARGET, return_value=make_response(200, json_error=True)):
            assert client.lookup("DA.X") == RemoteUnavailable("malformed_response")

    def test_malformed_record(self, client):
        """郵便番号が不正な応答は壊れた応答として扱う"""
        body = {"success": True, "data": {"postalCode": "16380", "address": "東京都"}}
        with patch(POST_TARGET, return_value=make_response(200, body)):
            assert client.lookup("DA.X") == RemoteUnavailable("malformed_response")

    def test_not_configured_skips_network(self):
        """ベースURLが空ならリクエストしない"""
        client = DigitalAddressClient("")
        with patch(POST_TARGET) as post:
            assert client.lookup("DA.X") == RemoteUnavailable("not_configured")
        post.assert_not_called()

    def test_from_config(self):
        config = {
            "api_url": "https://da.example.test/api/",
            "search_path": "/v2/search",
            "timeout": None,
            "user_agent": "test-agent",
        }
        client = DigitalAddressClient.from_config(config)
        assert client.search_url == "https://da.example.test/api/v2/search"
        assert client.timeout is None
        assert client.headers["User-Agent"] == "test-agent"


class TestPayloadParsing:
    """応答JSONの解析"""

    def test_normalize_postal_code(self):
        assert normalize_postal_code("1638001") == "163-8001"
        assert normalize_postal_code(" 163-8001 ") == "163-8001"
        assert normalize_postal_code("163-800") is None
        assert normalize_postal_code(1638001) is None

    def test_non_object_body(self):
        with pytest.raises(DirectoryResponseError):
            parse_search_payload(["163-8001"])

    def test_missing_address(self):
        with pytest.raises(DirectoryResponseError):
            parse_search_payload({"postalCode": "163-8001"})

    def test_error_without_message(self):
        with pytest.raises(DirectoryResponseError):
            parse_search_payload({"success": False})
