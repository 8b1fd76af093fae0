# synapse_core/models/wire.py
"""
프로비저닝 API가 주고받는 JSON 본문의 형태를 정의합니다.

API에는 강제되는 스키마가 없으므로 응답 모델은 모두 관대하게(lenient) 정의합니다.
누락되거나 null인 필드는 기본값으로 채우고, 알 수 없는 필드는 보존합니다.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class WireModel(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # null 값은 누락된 필드와 동일하게 취급합니다.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class ApiProject(WireModel):
    id: str = ""
    customer_id: str = ""
    platform_id: str = ""
    region_id: str = ""
    name: str = ""
    description: str = ""
    status: str = ""
    owner: str = ""
    billing_org: str = ""
    project_type: str = ""
    creation_date: str = ""
    deletion_date: Any = None


class ApiProjectResource(WireModel):
    """프로젝트에 속한 원시 리소스 레코드. type 태그에 따라 details의 형태가 달라집니다."""
    id: str = ""
    project_id: str = ""
    name: str = ""
    stack_id: str = ""
    status: str = ""
    type: str = ""
    creation_date: str = ""
    deletion_date: Any = None
    # JSON 문자열이 기본이지만 이미 디코딩된 객체가 올 수도 있습니다.
    details: Any = None
    parameters: Any = None


class ApiPlatform(WireModel):
    id: str = ""
    type: str = ""
    display_name: str = ""
    description: str = ""


class ApiRegion(WireModel):
    id: str = ""
    display_name: str = ""
    platform_id: str = ""
    value: str = ""


class ApiVMSize(WireModel):
    id: str = ""
    display_name: str = Field(default="", alias="Display_name")
    platform_id: str = ""
    value: str = ""


class ApiOS(WireModel):
    id: str = ""
    display_name: str = Field(default="", alias="Display_name")
    platform_id: str = ""
    type: str = ""
    value: str = ""


class ApiActionResponse(WireModel):
    """create/delete 계열 엔드포인트의 응답. status는 문자열 "200"이 성공입니다."""
    message: str = ""
    status: str = ""


# --- Request bodies ---

class CreateProjectRequest(BaseModel):
    customer_id: str
    platform_id: str
    region_id: str
    project_name: str
    project_type: str
    owner: str
    billing_org: str
    description: str


class DeployVmRequest(BaseModel):
    project_id: str
    name: str
    instance_type: str
    os_id: str
    public_ip: str
    data_disk: str
    data_disk_size: Optional[str] = None
    key_pair: str
    subnet_id: str
    security_group_id: str
    platform_id: str

