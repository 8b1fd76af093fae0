# synapse_core/config.py
import os

# 프로비저닝 API 접속 설정
# 실제 배포 환경에서는 환경 변수로 덮어씁니다.
API_BASE_URL = os.getenv("SYNAPSE_API_URL", "http://localhost:8000").rstrip("/")

# 대시보드는 단일 고객(customer) 범위로 동작합니다.
CUSTOMER_ID = os.getenv("SYNAPSE_CUSTOMER_ID", "fc6c5712-340f-11f0-a565-88ae1d45f51b")

LOG_LEVEL = os.getenv("SYNAPSE_LOG_LEVEL", "INFO").upper()


def _api_timeout_seconds() -> float:
    raw = (os.getenv("SYNAPSE_API_TIMEOUT") or "30").strip()
    try:
        value = float(raw)
    except ValueError:
        value = 30.0
    return value if value > 0 else 30.0


API_TIMEOUT_SECONDS = _api_timeout_seconds()

# create/delete 응답 본문의 status 필드가 이 문자열일 때만 성공으로 간주합니다.
# (HTTP 상태 코드가 아님)
SUCCESS_STATUS = "200"
