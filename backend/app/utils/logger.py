"""
ロギングユーティリティ
アプリケーション全体で使用する統一されたロガーを提供
"""

import logging
import logging.handlers
import os
import json
from datetime import datetime
from pathlib import Path
import traceback

# ログディレクトリの設定
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
if not LOG_DIR.exists():
    LOG_DIR.mkdir(parents=True, exist_ok=True)

# ログファイルのパス
GENERAL_LOG_FILE = LOG_DIR / "app.log"
ERROR_LOG_FILE = LOG_DIR / "errors.log"
API_LOG_FILE = LOG_DIR / "api_requests.log"

# LogRecordの標準属性（構造化ログに含めない）
_RESERVED_ATTRS = frozenset([
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", "getMessage",
])


class StructuredFormatter(logging.Formatter):
    """構造化されたログフォーマッター（JSON形式）"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # エラーの場合は追加情報を含める
        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        # extraで渡されたカスタム属性を追加
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, ensure_ascii=False, default=str)


# コンソール出力用の読みやすい形式
CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logger(
    name: str,
    log_file: Path,
    level: int = logging.INFO,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """ロガーをセットアップ（ファイルはJSON、コンソールはテキスト）"""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 既存のハンドラーをクリア
    logger.handlers.clear()

    # ファイルハンドラー（ローテーション付き）
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    file_handler.setFormatter(StructuredFormatter())
    logger.addHandler(file_handler)

    # コンソールハンドラー（開発環境用）
    if os.getenv("DEBUG", "false").lower() == "true":
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(console_handler)

    return logger


# アプリケーション用ロガー
app_logger = setup_logger("app", GENERAL_LOG_FILE, level=logging.DEBUG)
error_logger = setup_logger("errors", ERROR_LOG_FILE, level=logging.ERROR)
api_logger = setup_logger("api", API_LOG_FILE)


class LogContext:
    """ログコンテキストマネージャー

    処理の開始・終了と所要時間を記録する。ブロック内で ``ctx.status`` を
    設定すると、完了ログに結果として含まれる。
    """

    def __init__(self, logger: logging.Logger, operation: str, **kwargs):
        self.logger = logger
        self.operation = operation
        self.context = kwargs
        self.status = "success"
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.utcnow()
        self.logger.info(f"{self.operation} started", extra={
            "operation": self.operation,
            "context": self.context,
            "start_time": self.start_time.isoformat()
        })
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = (datetime.utcnow() - self.start_time).total_seconds()

        if exc_type is None:
            self.logger.info(f"{self.operation} completed", extra={
                "operation": self.operation,
                "context": self.context,
                "duration_seconds": duration,
                "status": self.status
            })
        else:
            self.logger.error(f"{self.operation} failed", extra={
                "operation": self.operation,
                "context": self.context,
                "duration_seconds": duration,
                "status": "error",
                "error_type": exc_type.__name__,
                "error_message": str(exc_val)
            }, exc_info=(exc_type, exc_val, exc_tb))
            # エラーログにも記録
            error_logger.error(f"{self.operation} failed", extra={
                "operation": self.operation,
                "context": self.context,
                "error_type": exc_type.__name__,
                "error_message": str(exc_val),
                "traceback": traceback.format_tb(exc_tb)
            })

        return False  # 例外を再発生させる
