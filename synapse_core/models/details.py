# synapse_core/models/details.py
"""
리소스 종류별 details 하위 문서의 선택적 스키마입니다.

모든 필드는 선택적이며 타입을 강제하지 않습니다(Any). 값의 해석과 기본값 처리는
분류기(resource_classifier)가 담당하므로, 여기서는 검증 실패가 발생하지 않아야 합니다.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict


class DetailsSchema(BaseModel):
    model_config = ConfigDict(extra="allow")


class NetworkDetails(DetailsSchema):
    CIDR: Any = None


class VmDetails(DetailsSchema):
    InstanceType: Any = None
    OsType: Any = None
    DataEBSSize: Any = None
    Cpu: Any = None
    Ram: Any = None


class DiskDetails(DetailsSchema):
    Size: Any = None
