"""デジタルアドレス検索のPydanticスキーマ"""
from pydantic import BaseModel
from typing import Optional


class DigitalAddressSearchRequest(BaseModel):
    digital_address: Optional[str] = None


class AddressRecordSchema(BaseModel):
    postal_code: str
    full_address: str
    digital_address: str


class DigitalAddressSearchResponse(BaseModel):
    status: str  # resolved|not_found|transport_failure|invalid_input
    source: Optional[str] = None  # remote|fallback（解決時のみ）
    result: Optional[AddressRecordSchema] = None
    message: Optional[str] = None
