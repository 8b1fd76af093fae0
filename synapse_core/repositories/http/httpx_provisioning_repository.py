import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from synapse_core import config
from synapse_core.models import (
    ApiActionResponse, ApiOS, ApiPlatform, ApiProject, ApiProjectResource,
    ApiRegion, ApiVMSize, CreateProjectRequest, DeployVmRequest,
)
from synapse_core.repositories.interfaces import IProvisioningRepository
from synapse_core.services.exceptions import RemoteRequestError, TransportError
from synapse_core.utils.json_fields import validate_or_salvage

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class HttpxProvisioningRepository(IProvisioningRepository):
    """httpx.AsyncClient로 프로비저닝 API를 호출하는 리포지토리 구현체입니다."""

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        customer_id: str = config.CUSTOMER_ID,
        timeout: float = config.API_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.customer_id = customer_id
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "HttpxProvisioningRepository":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    # ----------------------------------------------------------------------
    ## 요청/응답 처리
    # ----------------------------------------------------------------------

    async def _post(self, endpoint: str, body: Dict[str, Any], expect_body: bool = True) -> Any:
        try:
            response = await self._client.post(endpoint, json=body)
        except httpx.HTTPError as e:
            # 연결 오류뿐 아니라 본문 디코딩, 리다이렉트 초과 등 모든 요청 실패를 포함합니다.
            logger.error("API request failed for %s: %s", endpoint, e)
            raise TransportError(f"API request failed for {endpoint}: {e}") from e

        if not response.is_success:
            logger.error("API request failed for %s: HTTP %s", endpoint, response.status_code)
            raise RemoteRequestError(
                f"HTTP error! status: {response.status_code}", status_code=response.status_code
            )

        if not expect_body or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteRequestError(f"Invalid JSON body from {endpoint}.", response.status_code) from e

    def _parse_list(self, payload: Any, model: Type[M], endpoint: str) -> List[M]:
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise RemoteRequestError(f"Expected a list from {endpoint}, got {type(payload).__name__}.")
        # 레코드 하나가 잘못되었다고 목록 전체를 버리지 않습니다.
        records = []
        for item in payload:
            record = validate_or_salvage(item, model)
            if record is None:
                logger.warning("Skipping undecodable %s record from %s: %r", model.__name__, endpoint, item)
                continue
            records.append(record)
        return records

    def _parse_action(self, payload: Any, endpoint: str) -> ApiActionResponse:
        if not isinstance(payload, dict):
            raise RemoteRequestError(f"Expected an object from {endpoint}.")
        try:
            return ApiActionResponse.model_validate(payload)
        except ValidationError as e:
            raise RemoteRequestError(f"Unexpected payload shape from {endpoint}: {e}") from e

    # ----------------------------------------------------------------------
    ## 프로젝트 / 리소스
    # ----------------------------------------------------------------------

    async def list_projects(self) -> List[ApiProject]:
        endpoint = "/api/v1/project/get_all"
        payload = await self._post(endpoint, {"customer_id": self.customer_id})
        return self._parse_list(payload, ApiProject, endpoint)

    async def list_project_resources(self, project_id: str) -> List[ApiProjectResource]:
        endpoint = "/api/v1/project/get_project_resources"
        payload = await self._post(endpoint, {"project_id": project_id})
        return self._parse_list(payload, ApiProjectResource, endpoint)

    async def create_project(self, request: CreateProjectRequest) -> ApiActionResponse:
        endpoint = "/api/v1/project/create"
        payload = await self._post(endpoint, request.model_dump())
        return self._parse_action(payload, endpoint)

    async def delete_project(self, project_id: str) -> ApiActionResponse:
        # 서버가 노출하는 경로 철자 그대로 사용합니다.
        endpoint = "/api/v1/poject/delete"
        payload = await self._post(endpoint, {"project_id": project_id})
        return self._parse_action(payload, endpoint)

    async def delete_resource(self, project_id: str, resource_id: str) -> ApiActionResponse:
        endpoint = "/api/v1/resource/delete"
        payload = await self._post(endpoint, {"project_id": project_id, "id": resource_id})
        return self._parse_action(payload, endpoint)

    async def deploy_vm(self, request: DeployVmRequest) -> None:
        await self._post("/api/v1/deploy_vm", request.model_dump(exclude_none=True), expect_body=False)

    # ----------------------------------------------------------------------
    ## 조회용 참조 데이터 (lookup)
    # ----------------------------------------------------------------------

    async def list_platforms(self) -> List[ApiPlatform]:
        endpoint = "/api/v1/platform/get_all"
        payload = await self._post(endpoint, {"customer_id": self.customer_id})
        return self._parse_list(payload, ApiPlatform, endpoint)

    async def list_regions(self, platform_id: str) -> List[ApiRegion]:
        endpoint = "/api/v1/config/get_region_list"
        payload = await self._post(endpoint, self._platform_body(platform_id))
        return self._parse_list(payload, ApiRegion, endpoint)

    async def list_vm_sizes(self, platform_id: str) -> List[ApiVMSize]:
        endpoint = "/api/v1/config/get_vm_sizes"
        payload = await self._post(endpoint, self._platform_body(platform_id))
        return self._parse_list(payload, ApiVMSize, endpoint)

    async def list_os(self, platform_id: str) -> List[ApiOS]:
        endpoint = "/api/v1/config/get_os_list"
        payload = await self._post(endpoint, self._platform_body(platform_id))
        return self._parse_list(payload, ApiOS, endpoint)

    async def list_subnets(self, platform_id: str, region_id: str) -> List[dict]:
        endpoint = "/api/v1/config/get_subnet_list"
        payload = await self._post(endpoint, self._platform_body(platform_id, region_id))
        return self._raw_list(payload, endpoint)

    async def list_security_groups(self, platform_id: str, region_id: str) -> List[dict]:
        endpoint = "/api/v1/config/get_security_group_list"
        payload = await self._post(endpoint, self._platform_body(platform_id, region_id))
        return self._raw_list(payload, endpoint)

    def _platform_body(self, platform_id: str, region_id: Optional[str] = None) -> Dict[str, str]:
        body = {"customer_id": self.customer_id, "platform_id": platform_id}
        if region_id is not None:
            body["region_id"] = region_id
        return body

    def _raw_list(self, payload: Any, endpoint: str) -> List[dict]:
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise RemoteRequestError(f"Expected a list from {endpoint}, got {type(payload).__name__}.")
        return [item for item in payload if isinstance(item, dict)]
