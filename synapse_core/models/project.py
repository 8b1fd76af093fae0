# synapse_core/models/project.py
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from .resources import DataDisk, Network, ProjectResource, VirtualMachine


class RecordSource(str, Enum):
    """프로젝트가 어디에서 왔는지. REMOTE만 원격 API가 확인한 신뢰할 수 있는 상태입니다."""
    REMOTE = "remote"
    LOCAL = "local"
    SAMPLE = "sample"


class Project(BaseModel):
    """
    대시보드가 다루는 하나의 클라우드 프로젝트(집합 루트)입니다.
    여섯 개의 리소스 컬렉션을 소유하며, 엔티티는 여러 프로젝트에 공유되지 않습니다.
    """
    id: str
    name: str
    description: str = ""
    owner: str = ""
    billing_organization: str = ""
    status: str = "Active"
    project_type: str = ""
    creation_date: str = ""
    deletion_date: str = ""

    platform_id: str = ""
    region_id: str = ""
    platform: str = "AWS"
    region: str = "us-east-1"

    networks: List[Network] = Field(default_factory=list)
    virtual_machines: List[VirtualMachine] = Field(default_factory=list)
    data_disks: List[DataDisk] = Field(default_factory=list)
    security_resources: List[ProjectResource] = Field(default_factory=list)
    backup_resources: List[ProjectResource] = Field(default_factory=list)
    storage_resources: List[ProjectResource] = Field(default_factory=list)

    source: RecordSource = RecordSource.REMOTE

    @property
    def is_authoritative(self) -> bool:
        return self.source == RecordSource.REMOTE

    def resource_count(self) -> int:
        return (
            len(self.networks) + len(self.virtual_machines) + len(self.data_disks)
            + len(self.security_resources) + len(self.backup_resources)
            + len(self.storage_resources)
        )


class ProjectCreate(BaseModel):
    name: str
    description: str = ""
    platform_id: str = ""
    region_id: str = ""
    project_type: str = "default"
    owner: str = ""
    billing_organization: str = ""
