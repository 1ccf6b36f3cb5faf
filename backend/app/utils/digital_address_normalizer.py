"""
デジタルアドレス入力の正規化

前後の空白（全角スペース・BOMを含む）を除去し、空入力を拒否する。
大文字小文字や全角半角の変換は行わない。
"""

import re
from typing import Any, Union

from .digital_address_outcomes import DigitalAddress, InvalidInput

# 前後の空白（\sはU+3000などのUnicode空白を含む）とBOM
_EDGE_WHITESPACE = re.compile(r'^[\s\ufeff]+|[\s\ufeff]+$')

REASON_EMPTY = 'empty'
REASON_NOT_A_STRING = 'not_a_string'


def normalize(raw: Any) -> Union[DigitalAddress, InvalidInput]:
    """
    入力文字列をデジタルアドレスに正規化

    Args:
        raw: ユーザーが入力した文字列

    Returns:
        DigitalAddress、または空入力の場合は InvalidInput("empty")
    """
    if raw is None:
        return InvalidInput(REASON_EMPTY)
    if not isinstance(raw, str):
        return InvalidInput(REASON_NOT_A_STRING)

    trimmed = _EDGE_WHITESPACE.sub('', raw)
    if not trimmed:
        return InvalidInput(REASON_EMPTY)

    return DigitalAddress(trimmed)
