"""
デジタルアドレス検索の値オブジェクト

検索キー（DigitalAddress）、住所レコード（AddressRecord）と、
検索結果を表すタグ付きの結果型（ResolutionOutcome）を定義する。
すべてリクエスト単位で生成され、共有されない不変オブジェクト。
"""

import re
from dataclasses import dataclass
from typing import Union

# 郵便番号の形式（NNN-NNNN）
POSTAL_CODE_PATTERN = re.compile(r'^\d{3}-\d{4}$')

SOURCE_REMOTE = 'remote'
SOURCE_FALLBACK = 'fallback'


def is_valid_postal_code(value: str) -> bool:
    """郵便番号がNNN-NNNN形式かどうか"""
    return isinstance(value, str) and bool(POSTAL_CODE_PATTERN.match(value))


@dataclass(frozen=True)
class DigitalAddress:
    """正規化済みのデジタルアドレス（空文字にはならない）"""
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("DigitalAddress must be a non-empty string")
        if self.value != self.value.strip():
            raise ValueError("DigitalAddress must already be trimmed")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AddressRecord:
    """郵便番号・住所・入力されたデジタルアドレスの組"""
    postal_code: str
    full_address: str
    digital_address: str

    def __post_init__(self):
        if not is_valid_postal_code(self.postal_code):
            raise ValueError(f"invalid postal code: {self.postal_code!r}")
        if not self.full_address or not self.full_address.strip():
            raise ValueError("full_address must not be empty")
        if not self.digital_address:
            raise ValueError("digital_address must not be empty")

    def to_dict(self) -> dict:
        return {
            'postal_code': self.postal_code,
            'full_address': self.full_address,
            'digital_address': self.digital_address,
        }


@dataclass(frozen=True)
class Resolved:
    """住所が確定した"""
    record: AddressRecord
    source: str = SOURCE_REMOTE
    tag = 'resolved'


@dataclass(frozen=True)
class NotFound:
    """リモートでもフォールバックでも見つからなかった"""
    tag = 'not_found'


@dataclass(frozen=True)
class TransportFailure:
    """リモートが明示的にエラーを返した"""
    reason: str
    tag = 'transport_failure'


@dataclass(frozen=True)
class InvalidInput:
    """入力が不正（空など）"""
    reason: str
    tag = 'invalid_input'


ResolutionOutcome = Union[Resolved, NotFound, TransportFailure, InvalidInput]
