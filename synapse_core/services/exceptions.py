# synapse_core/services/exceptions.py

# --- Remote (Provisioning API) Exceptions ---
class ProvisioningError(Exception):
    """프로비저닝 API 호출이 실패했을 때의 공통 상위 예외"""
    pass

class TransportError(ProvisioningError):
    """네트워크/DNS/타임아웃 등 전송 계층에서 실패했을 때"""
    pass

class RemoteRequestError(ProvisioningError):
    """HTTP 상태 코드가 2xx가 아니거나 응답 본문을 해석할 수 없을 때"""
    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code

class RemoteOperationError(ProvisioningError):
    """응답 본문의 status 필드가 성공 값("200")이 아닐 때"""
    def __init__(self, message: str, status: str = ""):
        super().__init__(message)
        self.status = status
