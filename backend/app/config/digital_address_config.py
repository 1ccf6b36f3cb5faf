"""
デジタルアドレス検索の設定
環境変数（.envを含む）またはデフォルト値から設定を読み込む
"""

import os
from typing import Dict, Any, List, Optional

from dotenv import load_dotenv

# 環境変数を読み込み
load_dotenv()


class DigitalAddressConfig:
    """デジタルアドレス検索の設定クラス"""

    # デフォルト設定
    DEFAULT_API_URL = ''  # 空ならフォールバックのみで動作
    DEFAULT_SEARCH_PATH = '/search/address'
    DEFAULT_USER_AGENT = 'DigitalAddressSearch/1.0'
    DEFAULT_CORS_ALLOW_ORIGINS = 'http://localhost:3000'

    @classmethod
    def get_config(cls) -> Dict[str, Any]:
        """環境変数またはデフォルト値から設定を取得"""
        return {
            'api_url': os.getenv('DIGITAL_ADDRESS_API_URL', cls.DEFAULT_API_URL).strip(),
            'search_path': os.getenv('DIGITAL_ADDRESS_SEARCH_PATH', cls.DEFAULT_SEARCH_PATH),
            'timeout': cls._parse_timeout(os.getenv('DIGITAL_ADDRESS_TIMEOUT')),
            'user_agent': os.getenv('DIGITAL_ADDRESS_USER_AGENT', cls.DEFAULT_USER_AGENT),
        }

    @classmethod
    def get_cors_origins(cls) -> List[str]:
        """CORSで許可するオリジンの一覧を取得"""
        raw = os.getenv('CORS_ALLOW_ORIGINS', cls.DEFAULT_CORS_ALLOW_ORIGINS)
        return [origin.strip() for origin in raw.split(',') if origin.strip()]

    @staticmethod
    def _parse_timeout(value: Optional[str]) -> Optional[float]:
        # 未設定・空文字はタイムアウトなし
        if value is None or not value.strip():
            return None
        timeout = float(value)
        if timeout <= 0:
            raise ValueError(f"DIGITAL_ADDRESS_TIMEOUT must be positive: {value}")
        return timeout
