"""
デジタルアドレスAPIクライアント

日本郵便のデジタルアドレスAPIに1回だけ問い合わせ、応答を
RemoteRecord / RemoteNotFound / RemoteError / RemoteUnavailable に分類する。
リトライは行わない。ネットワーク例外はここで吸収し、呼び出し側には
RemoteUnavailable として返す。
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import requests

from ..config.digital_address_config import DigitalAddressConfig
from ..exceptions import DirectoryResponseError
from .digital_address_outcomes import is_valid_postal_code
from .logger import api_logger


@dataclass(frozen=True)
class RemoteRecord:
    """ディレクトリサービスが返した住所"""
    postal_code: str
    full_address: str
    digital_address: Optional[str] = None


@dataclass(frozen=True)
class RemoteNotFound:
    """ディレクトリサービスが「該当なし」を返した"""
    pass


@dataclass(frozen=True)
class RemoteError:
    """ディレクトリサービスが整形済みのエラーを返した"""
    message: str


@dataclass(frozen=True)
class RemoteUnavailable:
    """ディレクトリサービスに到達できない、または応答が壊れている"""
    reason: str


RemoteResponse = Union[RemoteRecord, RemoteNotFound, RemoteError, RemoteUnavailable]

# ゲートウェイ系のステータスは通信障害として扱う
UNAVAILABLE_STATUS_CODES = {502, 503, 504}

NOT_FOUND_ERROR_CODES = {'NOT_FOUND', 'ADDRESS_NOT_FOUND'}

_SEVEN_DIGITS = re.compile(r'^\d{7}$')


def normalize_postal_code(value: Any) -> Optional[str]:
    """郵便番号をNNN-NNNN形式にそろえる（7桁の数字にはハイフンを挿入）"""
    if not isinstance(value, str):
        return None
    code = value.strip()
    if _SEVEN_DIGITS.match(code):
        code = f"{code[:3]}-{code[3:]}"
    return code if is_valid_postal_code(code) else None


def _error_message(body: Any) -> Optional[str]:
    """エラー応答からメッセージを取り出す（取り出せなければNone）"""
    if not isinstance(body, dict):
        return None
    error = body.get('error')
    if isinstance(error, dict):
        message = error.get('message') or error.get('code')
    elif isinstance(error, str):
        message = error
    else:
        message = body.get('message')
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


def _error_code(body: Dict[str, Any]) -> Optional[str]:
    error = body.get('error')
    if isinstance(error, dict) and isinstance(error.get('code'), str):
        return error['code'].upper()
    return None


def parse_search_payload(body: Any) -> RemoteResponse:
    """
    2xx応答のJSONを分類

    Raises:
        DirectoryResponseError: 応答の形式が想定と異なる場合
    """
    if not isinstance(body, dict):
        raise DirectoryResponseError("response body is not a JSON object")

    if body.get('success') is False:
        if _error_code(body) in NOT_FOUND_ERROR_CODES:
            return RemoteNotFound()
        message = _error_message(body)
        if message is None:
            raise DirectoryResponseError("error response without message")
        return RemoteError(message)

    if 'data' in body:
        data = body['data']
        if data is None:
            return RemoteNotFound()
    else:
        data = body

    if not isinstance(data, dict):
        raise DirectoryResponseError("record is not a JSON object")

    postal_code = normalize_postal_code(data.get('postalCode') or data.get('zipCode'))
    full_address = data.get('fullAddress') or data.get('address')
    if postal_code is None:
        raise DirectoryResponseError(f"invalid postal code: {data.get('postalCode')!r}")
    if not isinstance(full_address, str) or not full_address.strip():
        raise DirectoryResponseError("missing address")

    echo = data.get('digitalAddress')
    return RemoteRecord(
        postal_code=postal_code,
        full_address=full_address.strip(),
        digital_address=echo if isinstance(echo, str) else None
    )


class DigitalAddressClient:
    """デジタルアドレスAPIの検索エンドポイントを呼び出すクライアント"""

    def __init__(self, base_url: str,
                 search_path: str = DigitalAddressConfig.DEFAULT_SEARCH_PATH,
                 timeout: Optional[float] = None,
                 user_agent: str = DigitalAddressConfig.DEFAULT_USER_AGENT):
        """
        初期化

        Args:
            base_url: APIのベースURL（空文字ならリモート検索を行わない）
            search_path: 検索エンドポイントのパス
            timeout: タイムアウト秒数（Noneなら無制限）
            user_agent: User-Agentヘッダー
        """
        self.base_url = (base_url or '').rstrip('/')
        self.search_path = search_path
        self.timeout = timeout
        self.headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'User-Agent': user_agent,
        }

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> 'DigitalAddressClient':
        """設定からクライアントを生成"""
        config = config or DigitalAddressConfig.get_config()
        return cls(
            base_url=config['api_url'],
            search_path=config['search_path'],
            timeout=config['timeout'],
            user_agent=config['user_agent']
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    @property
    def search_url(self) -> str:
        return f"{self.base_url}{self.search_path}"

    def lookup(self, digital_address: str) -> RemoteResponse:
        """
        デジタルアドレスを1回だけ検索

        Args:
            digital_address: 正規化済みのデジタルアドレス

        Returns:
            分類済みの応答
        """
        if not self.is_configured:
            api_logger.info("デジタルアドレスAPIが未設定のためリモート検索をスキップ")
            return RemoteUnavailable('not_configured')

        try:
            response = requests.post(
                self.search_url,
                json={'digitalAddress': digital_address},
                headers=self.headers,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            api_logger.warning(f"デジタルアドレスAPIに接続できません: {e}", extra={
                "url": self.search_url,
                "error_type": type(e).__name__
            })
            return RemoteUnavailable(type(e).__name__)

        result = self._classify(response)
        api_logger.info("デジタルアドレスAPI応答", extra={
            "url": self.search_url,
            "status_code": response.status_code,
            "result": type(result).__name__
        })
        return result

    def _classify(self, response: requests.Response) -> RemoteResponse:
        status = response.status_code

        if status in UNAVAILABLE_STATUS_CODES:
            return RemoteUnavailable(f"http_{status}")

        try:
            body = response.json()
        except ValueError:
            body = None

        # 該当なしのエラーコードはステータスに関係なく優先
        if isinstance(body, dict) and _error_code(body) in NOT_FOUND_ERROR_CODES:
            return RemoteNotFound()

        if status == 404:
            # JSONのエラー応答がない404はパス・プロキシの問題として扱う
            if _error_message(body) is None:
                return RemoteUnavailable('http_404')
            return RemoteNotFound()

        if not 200 <= status < 300:
            message = _error_message(body)
            if message is None:
                return RemoteUnavailable(f"http_{status}")
            return RemoteError(message)

        try:
            return parse_search_payload(body)
        except DirectoryResponseError as e:
            api_logger.warning(f"デジタルアドレスAPIの応答を解釈できません: {e}", extra={
                "url": self.search_url,
                "status_code": status
            })
            return RemoteUnavailable('malformed_response')
