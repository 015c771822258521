"""
서비스 계층 예외

각 예외는 HTTP 상태 코드와 오류 종류(kind)를 가지며
main.py의 예외 핸들러가 공통 응답 형식으로 변환함.
"""


class ServiceError(Exception):
    """서비스 예외 기본 클래스"""
    status_code = 500
    kind = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """입력값 오류"""
    status_code = 400
    kind = "validation_error"


class AuthenticationError(ServiceError):
    """인증 실패 (사용자 존재 여부를 드러내지 않는 메시지 사용)"""
    status_code = 401
    kind = "authentication_error"


class AuthorizationError(ServiceError):
    """권한 없음"""
    status_code = 403
    kind = "authorization_error"


class NotFoundError(ServiceError):
    """대상 없음"""
    status_code = 404
    kind = "not_found"


class ConflictError(ServiceError):
    """중복 또는 참조 중인 데이터"""
    status_code = 409
    kind = "conflict"
