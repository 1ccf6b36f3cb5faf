"""
フォールバック用の住所テーブル

ディレクトリサービスに接続できない場合にのみ使う、静的な近似照合テーブル。
照合は定義順に行い、match_keyが入力に部分文字列として含まれる最初の行を採用する。
文字列はそのまま比較する（大文字小文字・全角半角の正規化はしない）。
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .digital_address_outcomes import is_valid_postal_code


@dataclass(frozen=True)
class FallbackEntry:
    match_key: str
    postal_code: str
    full_address: str

    def __post_init__(self):
        if not self.match_key:
            raise ValueError("match_key must not be empty")
        if not is_valid_postal_code(self.postal_code):
            raise ValueError(f"invalid postal code: {self.postal_code!r}")
        if not self.full_address:
            raise ValueError("full_address must not be empty")

    def matches(self, digital_address: str) -> bool:
        return self.match_key in digital_address


_SHINJUKU = ('163-8001', '東京都新宿区西新宿二丁目8番1号')
_UMEDA = ('530-0001', '大阪府大阪市北区梅田一丁目1番1号')
_MINATOMIRAI = ('220-8120', '神奈川県横浜市西区みなとみらい二丁目2番1号')

# 完全な住所表記を先に、行政区画のキーを後に並べる
DEFAULT_FALLBACK_TABLE: Tuple[FallbackEntry, ...] = (
    FallbackEntry('東京都新宿区西新宿2-8-1', *_SHINJUKU),
    FallbackEntry('大阪府大阪市北区梅田1-1-1', *_UMEDA),
    FallbackEntry('神奈川県横浜市西区みなとみらい2-2-1', *_MINATOMIRAI),
    FallbackEntry('新宿区', *_SHINJUKU),
    FallbackEntry('大阪市', *_UMEDA),
    FallbackEntry('横浜市', *_MINATOMIRAI),
    FallbackEntry('神奈川県', *_MINATOMIRAI),
)


def find_fallback_entry(
    digital_address: str,
    table: Iterable[FallbackEntry] = DEFAULT_FALLBACK_TABLE
) -> Optional[FallbackEntry]:
    """入力にmatch_keyが含まれる最初のエントリを返す（なければNone）"""
    for entry in table:
        if entry.matches(digital_address):
            return entry
    return None
