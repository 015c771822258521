"""
공통 스키마
JSON 필드명은 camelCase (snake_case 입력도 허용)
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase 별칭을 쓰는 기본 모델"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def not_blank(value: str) -> str:
    """앞뒤 공백 제거 후 빈 문자열이면 오류"""
    value = value.strip()
    if not value:
        raise ValueError("Утга хоосон байж болохгүй")
    return value


def not_empty(value: str) -> str:
    """빈 문자열이면 오류 (비밀번호용, 공백을 제거하지 않음)"""
    if not value:
        raise ValueError("Утга хоосон байж болохгүй")
    return value


class ErrorResponse(BaseModel):
    """에러 응답"""
    detail: str
    status_code: int
    error: str

    class Config:
        json_schema_extra = {
            "example": {
                "detail": "Хэрэглэгч олдсонгүй эсвэл нууц үг буруу байна",
                "status_code": 401,
                "error": "authentication_error"
            }
        }


class MessageResponse(BaseModel):
    """메시지 응답"""
    message: str
