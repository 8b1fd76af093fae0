# synapse_core/models/resources.py
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class OSType(str, Enum):
    UBUNTU = "Ubuntu"
    WINDOWS_SERVER = "Windows Server"


class ResourceCollection(str, Enum):
    """Project가 소유한 여섯 개의 리소스 컬렉션. remove_resource의 대상 지정에 사용됩니다."""
    NETWORK = "network"
    VIRTUAL_MACHINE = "virtualMachine"
    DATA_DISK = "dataDisk"
    SECURITY = "securityResource"
    BACKUP = "backupResource"
    STORAGE = "storageResource"

    @property
    def attribute(self) -> str:
        return _COLLECTION_ATTRIBUTES[self]


_COLLECTION_ATTRIBUTES = {
    ResourceCollection.NETWORK: "networks",
    ResourceCollection.VIRTUAL_MACHINE: "virtual_machines",
    ResourceCollection.DATA_DISK: "data_disks",
    ResourceCollection.SECURITY: "security_resources",
    ResourceCollection.BACKUP: "backup_resources",
    ResourceCollection.STORAGE: "storage_resources",
}


class Network(BaseModel):
    """
    하나의 네트워크(VPC)와 그에 속한 서브넷 CIDR 목록입니다.
    같은 이름/ID를 가진 여러 원시 레코드가 하나의 Network로 합쳐집니다.
    """
    id: str
    name: str
    subnets: List[str] = Field(default_factory=list)


class VirtualMachine(BaseModel):
    """
    프로젝트에 배포된 가상 머신입니다.
    network_id는 소유 관계가 아닌 역참조이며, details는 화면 표시용으로 원본 문자열을 보존합니다.
    """
    id: str
    name: str
    network_id: str = ""
    status: str = ""
    type: str = "Unknown"
    os: OSType = OSType.UBUNTU
    cpu: str = "N/A"
    ram: str = "N/A"
    disk_size: int = 20
    details: str = ""


class DataDisk(BaseModel):
    id: str
    name: str
    size: int = 100


class ProjectResource(BaseModel):
    """보안/백업/스토리지 리소스의 공통 형태. details는 해석하지 않고 그대로 보관합니다."""
    id: str
    name: str
    type: str
    status: str = ""
    details: Any = None
    creation_date: str = ""


# --- 로컬 생성 요청 ---

class NetworkCreate(BaseModel):
    name: str
    subnets: List[str] = Field(default_factory=list)


class DataDiskCreate(BaseModel):
    name: str
    size: int = 100


class VirtualMachineCreate(BaseModel):
    name: str
    network_id: str = ""
    status: str = "Pending"
    type: str = ""
    os: OSType = OSType.UBUNTU
    cpu: str = "2 vCPU"
    ram: str = "4 GB"
    disk_size: int = 50


class VmDeployConfig(BaseModel):
    """VM 배포 요청에 필요한 플랫폼 측 식별자들입니다."""
    instance_type_id: str
    os_id: str
    subnet_id: Optional[str] = None
    security_group_id: Optional[str] = None
    public_ip: bool = False
    data_disk: bool = False
    data_disk_size: Optional[int] = None
    key_pair: str = ""
