#!/usr/bin/env python3
"""
デジタルアドレス検索API サーバー
デジタルアドレスから郵便番号と住所を検索する
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import time

from .config.digital_address_config import DigitalAddressConfig
from .utils.logger import api_logger, error_logger

# APIルーターのインポート
from .api import digital_address

app = FastAPI(title="デジタルアドレス検索API", version="1.0.0")

# CORS設定
app.add_middleware(
    CORSMiddleware,
    allow_origins=DigitalAddressConfig.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ロギングミドルウェア
@app.middleware("http")
async def log_requests(request, call_next):
    """すべてのHTTPリクエストをログに記録"""
    start_time = time.time()

    api_logger.info(
        "API Request",
        extra={
            "method": request.method,
            "url": str(request.url),
            "path": request.url.path,
            "query_params": dict(request.query_params)
        }
    )

    try:
        response = await call_next(request)
        process_time = time.time() - start_time

        api_logger.info(
            "API Response",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time": process_time
            }
        )

        response.headers["X-Process-Time"] = str(process_time)
        return response

    except Exception as e:
        process_time = time.time() - start_time
        error_logger.error(
            f"Request failed: {str(e)}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "process_time": process_time
            },
            exc_info=True
        )
        raise

# ルーターの登録
app.include_router(digital_address.router)

# 起動時の処理
@app.on_event("startup")
async def startup_event():
    """アプリケーション起動時の処理"""
    config = DigitalAddressConfig.get_config()
    if config['api_url']:
        api_logger.info(f"デジタルアドレス検索サービスを開始しました: {config['api_url']}")
    else:
        api_logger.info("デジタルアドレス検索サービスを開始しました（フォールバックのみ）")

# ヘルスチェック
@app.get("/health")
async def health_check():
    """ヘルスチェックエンドポイント"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    import sys

    # ポート番号の設定
    port = 8001
    if len(sys.argv) > 1:
        try:
            port = int(sys.argv[1])
        except ValueError:
            print(f"無効なポート番号: {sys.argv[1]}")
            sys.exit(1)

    print(f"APIサーバーを起動中... http://localhost:{port}")
    print(f"対話的APIドキュメント: http://localhost:{port}/docs")

    uvicorn.run(
        "backend.app.main:app",
        host="0.0.0.0",
        port=port,
        reload=True,
        log_level="info"
    )
