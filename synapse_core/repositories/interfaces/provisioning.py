from abc import ABC, abstractmethod
from typing import List

from synapse_core.models import (
    ApiActionResponse, ApiOS, ApiPlatform, ApiProject, ApiProjectResource,
    ApiRegion, ApiVMSize, CreateProjectRequest, DeployVmRequest,
)


class IProvisioningRepository(ABC):
    """
    원격 프로비저닝 API에 대한 접근 경계입니다.

    구현체는 전송 실패 시 TransportError, 2xx가 아닌 응답이나 해석할 수 없는
    본문에 대해 RemoteRequestError를 발생시킵니다. 비즈니스 로직은 포함하지 않습니다.
    """

    @abstractmethod
    async def list_projects(self) -> List[ApiProject]:
        """고객에게 속한 모든 프로젝트 목록을 조회합니다."""
        pass

    @abstractmethod
    async def list_project_resources(self, project_id: str) -> List[ApiProjectResource]:
        """특정 프로젝트의 원시 리소스 레코드 목록을 조회합니다."""
        pass

    @abstractmethod
    async def create_project(self, request: CreateProjectRequest) -> ApiActionResponse:
        """새 프로젝트 생성을 요청합니다. 성공 여부는 응답의 status 필드로 판단합니다."""
        pass

    @abstractmethod
    async def delete_project(self, project_id: str) -> ApiActionResponse:
        """프로젝트 삭제를 요청합니다."""
        pass

    @abstractmethod
    async def delete_resource(self, project_id: str, resource_id: str) -> ApiActionResponse:
        """프로젝트 내 단일 리소스 삭제를 요청합니다."""
        pass

    @abstractmethod
    async def deploy_vm(self, request: DeployVmRequest) -> None:
        """
        VM 배포를 요청합니다.

        비동기 엔드포인트이므로 의미 있는 응답 본문이 없습니다. 예외 없이 반환되면
        요청이 접수된 것이며, 실제 배포 결과는 이후 리소스 목록 조회로 확인합니다.
        """
        pass

    @abstractmethod
    async def list_platforms(self) -> List[ApiPlatform]:
        pass

    @abstractmethod
    async def list_regions(self, platform_id: str) -> List[ApiRegion]:
        pass

    @abstractmethod
    async def list_vm_sizes(self, platform_id: str) -> List[ApiVMSize]:
        pass

    @abstractmethod
    async def list_os(self, platform_id: str) -> List[ApiOS]:
        pass

    @abstractmethod
    async def list_subnets(self, platform_id: str, region_id: str) -> List[dict]:
        pass

    @abstractmethod
    async def list_security_groups(self, platform_id: str, region_id: str) -> List[dict]:
        pass

    async def close(self) -> None:
        """보유한 연결 자원을 정리합니다. 기본 구현은 아무것도 하지 않습니다."""
        return None
