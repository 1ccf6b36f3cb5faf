"""
デジタルアドレス解決

1. ディレクトリサービスに1回だけ問い合わせる
2. 応答を分類する
   - 住所あり → Resolved（digital_addressは入力値で上書き）
   - 該当なし → NotFound
   - エラー応答 → TransportFailure（フォールバックしない）
   - 接続不可・応答不正 → フォールバックへ
3. フォールバックテーブルを定義順に照合し、最初に一致した行を採用
4. 一致しなければ NotFound

どの入力に対しても結果型のいずれか1つを返し、例外は送出しない。
"""

from functools import lru_cache
from typing import Any, Iterable, Optional

from .digital_address_client import (
    DigitalAddressClient,
    RemoteError,
    RemoteNotFound,
    RemoteRecord,
    RemoteUnavailable,
)
from .digital_address_normalizer import normalize
from .digital_address_outcomes import (
    SOURCE_FALLBACK,
    SOURCE_REMOTE,
    AddressRecord,
    DigitalAddress,
    InvalidInput,
    NotFound,
    Resolved,
    ResolutionOutcome,
    TransportFailure,
)
from .fallback_table import DEFAULT_FALLBACK_TABLE, FallbackEntry, find_fallback_entry
from .logger import LogContext, app_logger, error_logger


class DigitalAddressResolver:
    """リモート検索とフォールバック照合をまとめる"""

    def __init__(self, client=None, fallback_table: Iterable[FallbackEntry] = DEFAULT_FALLBACK_TABLE):
        """
        Args:
            client: lookup(str) -> RemoteResponse を持つオブジェクト
            fallback_table: フォールバック用テーブル（定義順に照合）
        """
        self.client = client if client is not None else DigitalAddressClient.from_config()
        self.fallback_table = tuple(fallback_table)

    def resolve(self, address: DigitalAddress) -> ResolutionOutcome:
        """正規化済みのデジタルアドレスを解決"""
        with LogContext(app_logger, "digital_address_resolve", digital_address=address.value) as ctx:
            outcome = self._resolve(address)
            ctx.status = outcome.tag
            return outcome

    def _resolve(self, address: DigitalAddress) -> ResolutionOutcome:
        remote = self._lookup_remote(address)

        if isinstance(remote, RemoteRecord):
            try:
                record = AddressRecord(
                    postal_code=remote.postal_code,
                    full_address=remote.full_address,
                    digital_address=address.value
                )
            except ValueError as e:
                # 不正なレコードは応答不正として扱う
                app_logger.warning(f"リモートの住所レコードが不正です: {e}")
                return self._resolve_fallback(address, 'malformed_response')
            return Resolved(record, source=SOURCE_REMOTE)

        if isinstance(remote, RemoteNotFound):
            return NotFound()

        if isinstance(remote, RemoteError):
            app_logger.warning(f"デジタルアドレスAPIがエラーを返しました: {remote.message}")
            return TransportFailure(remote.message)

        reason = remote.reason if isinstance(remote, RemoteUnavailable) else 'unexpected_response'
        return self._resolve_fallback(address, reason)

    def _lookup_remote(self, address: DigitalAddress) -> Any:
        try:
            return self.client.lookup(address.value)
        except Exception as e:
            error_logger.error(f"デジタルアドレスAPIクライアントで予期しないエラー: {e}", exc_info=True)
            return RemoteUnavailable(type(e).__name__)

    def _resolve_fallback(self, address: DigitalAddress, reason: str) -> ResolutionOutcome:
        app_logger.info(f"リモート検索が利用できないためフォールバックを使用: {reason}", extra={
            "digital_address": address.value,
            "unavailable_reason": reason
        })

        entry = find_fallback_entry(address.value, self.fallback_table)
        if entry is None:
            return NotFound()

        app_logger.info(f"フォールバックで一致: {entry.match_key}", extra={
            "digital_address": address.value,
            "match_key": entry.match_key
        })
        record = AddressRecord(
            postal_code=entry.postal_code,
            full_address=entry.full_address,
            digital_address=address.value
        )
        return Resolved(record, source=SOURCE_FALLBACK)


@lru_cache(maxsize=None)
def get_default_resolver() -> DigitalAddressResolver:
    """設定から生成した共有リゾルバーを取得（状態を持たないので共有可能）"""
    return DigitalAddressResolver()


def search_digital_address(raw: Any, resolver: Optional[DigitalAddressResolver] = None) -> ResolutionOutcome:
    """
    入力文字列を正規化して解決

    Args:
        raw: ユーザー入力
        resolver: 使用するリゾルバー（省略時は共有リゾルバー）

    Returns:
        Resolved / NotFound / TransportFailure / InvalidInput のいずれか
    """
    normalized = normalize(raw)
    if isinstance(normalized, InvalidInput):
        app_logger.info(f"デジタルアドレスの入力が不正です: {normalized.reason}")
        return normalized

    resolver = resolver or get_default_resolver()
    return resolver.resolve(normalized)
