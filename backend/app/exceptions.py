"""
カスタム例外クラスの定義
"""

class DigitalAddressError(Exception):
    """デジタルアドレス検索に関する例外の基底クラス"""
    pass

class DirectoryResponseError(DigitalAddressError):
    """ディレクトリサービスの応答が解釈できない場合の例外"""
    pass
