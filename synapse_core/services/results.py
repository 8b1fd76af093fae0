# synapse_core/services/results.py
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class FailurePolicy(str, Enum):
    """
    원격 호출 실패를 스토어가 어떻게 다룰지 정합니다.

    FALLBACK_LOCAL: 실패를 감추고 로컬 변경으로 대체합니다. (add_project, remove_resource의 기본값)
    SURFACE: 실패를 error 필드와 결과값으로 그대로 드러냅니다.
    """
    FALLBACK_LOCAL = "fallback_local"
    SURFACE = "surface"


@dataclass(frozen=True)
class OperationResult:
    """
    스토어 연산의 결과(Ok | Err).

    ok가 True여도 fallback이 True이면 원격 호출은 실패했고 로컬 변경으로 대체된 것이며,
    이때 reason에는 감춰진 실패 원인이 남습니다.
    """
    ok: bool
    value: Any = None
    reason: Optional[str] = None
    fallback: bool = False

    @classmethod
    def success(cls, value: Any = None, *, fallback: bool = False, reason: Optional[str] = None) -> "OperationResult":
        return cls(ok=True, value=value, reason=reason, fallback=fallback)

    @classmethod
    def failure(cls, reason: str, *, value: Any = None, fallback: bool = False) -> "OperationResult":
        return cls(ok=False, value=value, reason=reason, fallback=fallback)

    def __bool__(self) -> bool:
        return self.ok
