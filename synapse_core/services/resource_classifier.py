# synapse_core/services/resource_classifier.py
"""
원시 리소스 레코드를 타입이 있는 Project 집합으로 분류합니다.

분류기는 순수 함수로만 구성됩니다. I/O가 없고, 같은 입력에 항상 같은 결과를 내며,
어떤 입력에도 예외를 던지지 않습니다. 개별 레코드를 해석할 수 없으면 그 레코드만
안전한 기본값으로 대체하고 나머지 분류는 계속 진행합니다.
"""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from synapse_core.models import (
    ApiPlatform, ApiProject, ApiProjectResource, ApiRegion, DataDisk, Network,
    OSType, Project, ProjectResource, RecordSource, VirtualMachine,
)
from synapse_core.models.details import DiskDetails, NetworkDetails, VmDetails
from synapse_core.utils.json_fields import decode_json_value, parse_or_default, to_int, validate_or_salvage

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_PLATFORM = "AWS"
DEFAULT_REGION = "us-east-1"
DEFAULT_VM_TYPE = "Unknown"
DEFAULT_VM_CPU = "N/A"
DEFAULT_VM_RAM = "N/A"
DEFAULT_VM_DISK_SIZE = 20
DEFAULT_DATA_DISK_SIZE = 100
DEFAULT_PROJECT_STATUS = "Active"


class ResourceKind(str, Enum):
    NETWORK = "network"
    COMPUTE = "compute"
    SECURITY = "security"
    BACKUP = "backup"
    DISK = "disk"
    OBJECT_STORAGE = "object_storage"
    UNKNOWN = "unknown"


# 와이어 type 태그 -> 리소스 종류. 여기에 없는 태그는 모두 UNKNOWN으로 처리되어 버려집니다.
TAG_TO_KIND: Dict[str, ResourceKind] = {
    "subnet": ResourceKind.NETWORK,
    "vpc": ResourceKind.NETWORK,
    "network": ResourceKind.NETWORK,
    "virtual_machine": ResourceKind.COMPUTE,
    "vm": ResourceKind.COMPUTE,
    "kms_key": ResourceKind.SECURITY,
    "security_group": ResourceKind.SECURITY,
    "backup_plan": ResourceKind.BACKUP,
    "backup_vault": ResourceKind.BACKUP,
    "backup_selection": ResourceKind.BACKUP,
    "disk": ResourceKind.DISK,
    "volume": ResourceKind.DISK,
    "s3": ResourceKind.OBJECT_STORAGE,
}


def resource_kind(tag: Any) -> ResourceKind:
    """와이어 type 태그를 ResourceKind로 매핑합니다. 모든 입력에 대해 정의됩니다."""
    if not isinstance(tag, str):
        return ResourceKind.UNKNOWN
    return TAG_TO_KIND.get(tag.strip(), ResourceKind.UNKNOWN)


@dataclass
class ClassifiedResources:
    """한 번의 분류 패스로 만들어진 여섯 개의 컬렉션."""
    networks: List[Network] = field(default_factory=list)
    virtual_machines: List[VirtualMachine] = field(default_factory=list)
    data_disks: List[DataDisk] = field(default_factory=list)
    security_resources: List[ProjectResource] = field(default_factory=list)
    backup_resources: List[ProjectResource] = field(default_factory=list)
    storage_resources: List[ProjectResource] = field(default_factory=list)

    def as_update(self) -> Dict[str, list]:
        return {
            "networks": self.networks,
            "virtual_machines": self.virtual_machines,
            "data_disks": self.data_disks,
            "security_resources": self.security_resources,
            "backup_resources": self.backup_resources,
            "storage_resources": self.storage_resources,
        }


# --------------------------------------------------------------------------
## 공개 함수
# --------------------------------------------------------------------------

def classify(
    raw_project: Any,
    raw_resources: Optional[Iterable[Any]],
    platforms: Optional[Sequence[Any]] = None,
    regions: Optional[Sequence[Any]] = None,
) -> Project:
    """
    원시 프로젝트 레코드와 리소스 레코드 목록으로 완전한 Project를 만듭니다.

    Args:
        raw_project: ApiProject 또는 같은 형태의 딕셔너리.
        raw_resources: ApiProjectResource 또는 딕셔너리의 목록.
        platforms: 플랫폼 표시 이름을 찾기 위한 참조 목록.
        regions: 리전 표시 이름을 찾기 위한 참조 목록.

    Returns:
        리소스가 종류별 컬렉션으로 분류된 Project. 예외를 던지지 않습니다.
    """
    project = _coerce(raw_project, ApiProject) or ApiProject()
    resources = classify_resources(raw_resources)

    return Project(
        id=project.id,
        name=project.name,
        description=project.description,
        owner=project.owner,
        billing_organization=project.billing_org,
        status=project.status or DEFAULT_PROJECT_STATUS,
        project_type=project.project_type,
        creation_date=project.creation_date,
        deletion_date=_as_text(project.deletion_date),
        platform_id=project.platform_id,
        region_id=project.region_id,
        platform=resolve_platform_name(project.platform_id, platforms),
        region=resolve_region_name(project.region_id, regions),
        source=RecordSource.REMOTE,
        **resources.as_update(),
    )


def classify_resources(raw_resources: Optional[Iterable[Any]]) -> ClassifiedResources:
    """리소스 레코드만 분류합니다. 프로젝트의 스칼라 필드는 다루지 않습니다."""
    result = ClassifiedResources()
    for item in raw_resources or []:
        record = _coerce(item, ApiProjectResource)
        if record is None:
            if isinstance(item, dict) and resource_kind(item.get("type")) is ResourceKind.COMPUTE:
                # VM은 해석할 수 없어도 목록에서 사라지면 안 됩니다.
                result.virtual_machines.append(_to_virtual_machine(ApiProjectResource(
                    id=_as_text(item.get("id")), name=_as_text(item.get("name")),
                )))
            else:
                logger.debug("Skipping undecodable resource record: %r", item)
            continue

        kind = resource_kind(record.type)
        if kind is ResourceKind.NETWORK:
            _merge_network(result.networks, record)
        elif kind is ResourceKind.COMPUTE:
            result.virtual_machines.append(_to_virtual_machine(record))
        elif kind is ResourceKind.SECURITY:
            result.security_resources.append(_to_project_resource(record))
        elif kind is ResourceKind.BACKUP:
            result.backup_resources.append(_to_project_resource(record))
        elif kind is ResourceKind.DISK:
            result.data_disks.append(_to_data_disk(record))
        elif kind is ResourceKind.OBJECT_STORAGE:
            result.storage_resources.append(_to_project_resource(record))
        else:
            # 알 수 없는 태그는 조용히 무시합니다. (새 리소스 종류에 대한 전방 호환)
            logger.debug("Ignoring resource %s with unrecognized type %r", record.id, record.type)
    return result


def resolve_platform_name(platform_id: str, platforms: Optional[Sequence[Any]]) -> str:
    platform = _find_by_id(platforms, platform_id, ApiPlatform)
    if platform is None:
        return DEFAULT_PLATFORM
    return platform.display_name or platform.type or DEFAULT_PLATFORM


def resolve_region_name(region_id: str, regions: Optional[Sequence[Any]]) -> str:
    region = _find_by_id(regions, region_id, ApiRegion)
    if region is None:
        return DEFAULT_REGION
    return region.display_name or region.value or DEFAULT_REGION


# --------------------------------------------------------------------------
## 리소스 종류별 변환
# --------------------------------------------------------------------------

def _merge_network(networks: List[Network], record: ApiProjectResource) -> None:
    # 같은 패스에서 이미 만든 네트워크 중 이름 또는 ID가 같은 것을 찾습니다.
    network = next(
        (n for n in networks if n.name == record.name or n.id == record.id), None
    )
    if network is None:
        network = Network(id=record.id, name=record.name)
        networks.append(network)

    details = parse_or_default(record.details, NetworkDetails)
    if details is None:
        if record.type.strip() == "subnet" and record.name:
            network.subnets.append(record.name)
        return
    if details.CIDR:
        network.subnets.append(str(details.CIDR))


def _to_virtual_machine(record: ApiProjectResource) -> VirtualMachine:
    network_id = _parameter_value(decode_json_value(record.parameters), "SubnetId")
    details = parse_or_default(record.details, VmDetails)

    if details is None:
        # 해석할 수 없는 VM도 화면에는 항상 보여야 하므로 보수적인 기본값으로 만듭니다.
        return VirtualMachine(
            id=record.id,
            name=record.name,
            network_id=network_id,
            status=record.status,
            type=DEFAULT_VM_TYPE,
            os=OSType.UBUNTU,
            cpu=DEFAULT_VM_CPU,
            ram=DEFAULT_VM_RAM,
            disk_size=DEFAULT_VM_DISK_SIZE,
            details=_as_text(record.details),
        )

    os_type = str(details.OsType or "").strip().lower()
    return VirtualMachine(
        id=record.id,
        name=record.name,
        network_id=network_id,
        status=record.status,
        type=_as_text(details.InstanceType) or DEFAULT_VM_TYPE,
        os=OSType.UBUNTU if os_type == "linux" else OSType.WINDOWS_SERVER,
        cpu=_as_text(details.Cpu) or DEFAULT_VM_CPU,
        ram=_as_text(details.Ram) or DEFAULT_VM_RAM,
        disk_size=to_int(details.DataEBSSize, DEFAULT_VM_DISK_SIZE),
        details=_as_text(record.details),
    )


def _to_data_disk(record: ApiProjectResource) -> DataDisk:
    details = parse_or_default(record.details, DiskDetails)
    size = to_int(details.Size, DEFAULT_DATA_DISK_SIZE) if details else DEFAULT_DATA_DISK_SIZE
    return DataDisk(id=record.id, name=record.name, size=size)


def _to_project_resource(record: ApiProjectResource) -> ProjectResource:
    return ProjectResource(
        id=record.id,
        name=record.name,
        type=record.type,
        status=record.status,
        details=record.details,
        creation_date=record.creation_date,
    )


# --------------------------------------------------------------------------
## 보조 함수
# --------------------------------------------------------------------------

def _parameter_value(parameters: Any, key: str) -> str:
    """
    스택 파라미터에서 key에 해당하는 값을 찾습니다.

    CloudFormation 형식의 [{"ParameterKey": ..., "ParameterValue": ...}] 리스트와
    단순 {key: value} 매핑을 모두 지원합니다. 찾지 못하면 빈 문자열.
    """
    if isinstance(parameters, dict):
        return _as_text(parameters.get(key))
    if isinstance(parameters, list):
        for entry in parameters:
            if isinstance(entry, dict) and entry.get("ParameterKey") == key:
                return _as_text(entry.get("ParameterValue"))
    return ""


def _find_by_id(items: Optional[Sequence[Any]], item_id: str, model: Type[M]) -> Optional[M]:
    if not item_id:
        return None
    for item in items or []:
        candidate = _coerce(item, model)
        if candidate is not None and getattr(candidate, "id", None) == item_id:
            return candidate
    return None


def _coerce(item: Any, model: Type[M]) -> Optional[M]:
    return validate_or_salvage(item, model)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)
