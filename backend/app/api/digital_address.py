"""
デジタルアドレス検索API
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..schemas.digital_address import (
    AddressRecordSchema,
    DigitalAddressSearchRequest,
    DigitalAddressSearchResponse,
)
from ..utils.digital_address_outcomes import (
    InvalidInput,
    NotFound,
    Resolved,
    ResolutionOutcome,
    TransportFailure,
)
from ..utils.digital_address_resolver import (
    DigitalAddressResolver,
    get_default_resolver,
    search_digital_address,
)

router = APIRouter(prefix="/api/digital-address", tags=["digital-address"])

# 結果ごとの表示メッセージ
MESSAGE_INVALID_INPUT = "デジタルアドレスを入力してください"
MESSAGE_NOT_FOUND = "指定されたデジタルアドレスが見つかりませんでした。正しいアドレスを入力してください。"
MESSAGE_TRANSPORT_FAILURE = "検索エラー: {reason}"

STATUS_CODES = {
    Resolved.tag: 200,
    InvalidInput.tag: 400,
    NotFound.tag: 404,
    TransportFailure.tag: 502,
}


def get_resolver() -> DigitalAddressResolver:
    """FastAPI依存性注入用のリゾルバー"""
    return get_default_resolver()


def outcome_message(outcome: ResolutionOutcome):
    """結果に対応するユーザー向けメッセージ（解決時はNone）"""
    if isinstance(outcome, InvalidInput):
        return MESSAGE_INVALID_INPUT
    if isinstance(outcome, NotFound):
        return MESSAGE_NOT_FOUND
    if isinstance(outcome, TransportFailure):
        return MESSAGE_TRANSPORT_FAILURE.format(reason=outcome.reason)
    return None


def build_response(outcome: ResolutionOutcome) -> DigitalAddressSearchResponse:
    if isinstance(outcome, Resolved):
        return DigitalAddressSearchResponse(
            status=outcome.tag,
            source=outcome.source,
            result=AddressRecordSchema(**outcome.record.to_dict())
        )
    return DigitalAddressSearchResponse(
        status=outcome.tag,
        message=outcome_message(outcome)
    )


@router.post("/search", response_model=DigitalAddressSearchResponse)
def search(
    request: DigitalAddressSearchRequest,
    resolver: DigitalAddressResolver = Depends(get_resolver)
):
    """
    デジタルアドレスから郵便番号と住所を検索

    リモートAPIに接続できない場合はフォールバックテーブルで近似検索する。
    """
    outcome = search_digital_address(request.digital_address, resolver=resolver)
    body = build_response(outcome)
    return JSONResponse(status_code=STATUS_CODES[outcome.tag], content=body.model_dump())
