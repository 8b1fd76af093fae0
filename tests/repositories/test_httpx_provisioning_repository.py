# tests/repositories/test_httpx_provisioning_repository.py
import json

import httpx
import pytest

from synapse_core.models import CreateProjectRequest, DeployVmRequest
from synapse_core.repositories.http import HttpxProvisioningRepository
from synapse_core.services.exceptions import RemoteRequestError, TransportError

# ===================================================================
#  가짜 전송 계층(MockTransport) 설정
# ===================================================================

class RecordingHandler:
    """요청을 기록하고 경로별로 준비된 응답을 돌려주는 가짜 서버."""
    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        if isinstance(route, Exception):
            raise route
        return route

    def body(self, index=-1):
        return json.loads(self.requests[index].content)


def make_repo(routes):
    handler = RecordingHandler(routes)
    repo = HttpxProvisioningRepository(
        base_url="http://provisioning.test/",
        customer_id="cust-1",
        transport=httpx.MockTransport(handler),
    )
    return repo, handler

# ===================================================================
#  프로젝트 / 리소스
# ===================================================================

@pytest.mark.asyncio
async def test_list_projects_posts_customer_id():
    repo, handler = make_repo({
        "/api/v1/project/get_all": httpx.Response(200, json=[
            {"id": "p-1", "name": "Alpha", "platform_id": "plat-1", "deletion_date": None, "extra": 1},
        ]),
    })

    async with repo:
        projects = await repo.list_projects()

    assert handler.requests[0].method == "POST"
    assert handler.body() == {"customer_id": "cust-1"}
    assert projects[0].id == "p-1"
    assert projects[0].region_id == ""


@pytest.mark.asyncio
async def test_list_project_resources_keeps_encoded_fields():
    details = json.dumps({"CIDR": "10.0.0.0/24"})
    repo, handler = make_repo({
        "/api/v1/project/get_project_resources": httpx.Response(200, json=[
            {"id": "r-1", "project_id": "p-1", "type": "subnet", "details": details, "parameters": None},
            "not-a-record",
        ]),
    })

    resources = await repo.list_project_resources("p-1")

    assert handler.body() == {"project_id": "p-1"}
    assert len(resources) == 1
    assert resources[0].details == details
    assert resources[0].parameters is None


@pytest.mark.asyncio
async def test_action_status_is_read_from_body():
    """create/delete는 HTTP 상태가 아니라 본문의 status 문자열을 돌려줍니다."""
    repo, handler = make_repo({
        "/api/v1/project/create": httpx.Response(200, json={"message": "created", "status": 200}),
        "/api/v1/poject/delete": httpx.Response(200, json={"message": "nope", "status": "400"}),
        "/api/v1/resource/delete": httpx.Response(200, json={"message": "ok", "status": "200"}),
    })
    request = CreateProjectRequest(
        customer_id="cust-1", platform_id="plat-1", region_id="reg-1", project_name="Alpha",
        project_type="default", owner="ops", billing_org="Finance", description="",
    )

    created = await repo.create_project(request)
    deleted = await repo.delete_project("p-1")
    removed = await repo.delete_resource("p-1", "r-1")

    assert created.status == "200"
    assert handler.body(0)["project_name"] == "Alpha"
    assert deleted.status == "400"
    assert handler.body(1) == {"project_id": "p-1"}
    assert removed.status == "200"
    assert handler.body(2) == {"project_id": "p-1", "id": "r-1"}


@pytest.mark.asyncio
async def test_deploy_vm_ignores_empty_body():
    repo, handler = make_repo({"/api/v1/deploy_vm": httpx.Response(202)})
    request = DeployVmRequest(
        project_id="p-1", name="web", instance_type="size-1", os_id="os-1", public_ip="false",
        data_disk="false", key_pair="", subnet_id="subnet-1", security_group_id="", platform_id="plat-1",
    )

    assert await repo.deploy_vm(request) is None
    body = handler.body()
    assert "data_disk_size" not in body
    assert body["security_group_id"] == ""

# ===================================================================
#  조회용 참조 데이터
# ===================================================================

@pytest.mark.asyncio
async def test_lookup_bodies_include_platform_and_region():
    repo, handler = make_repo({
        "/api/v1/config/get_vm_sizes": httpx.Response(200, json=[{"id": "s-1", "Display_name": "Small"}]),
        "/api/v1/config/get_subnet_list": httpx.Response(200, json=[{"id": "subnet-1"}, 5]),
    })

    sizes = await repo.list_vm_sizes("plat-1")
    subnets = await repo.list_subnets("plat-1", "reg-1")

    assert sizes[0].display_name == "Small"
    assert handler.body(0) == {"customer_id": "cust-1", "platform_id": "plat-1"}
    assert handler.body(1) == {"customer_id": "cust-1", "platform_id": "plat-1", "region_id": "reg-1"}
    assert subnets == [{"id": "subnet-1"}]

# ===================================================================
#  오류 처리
# ===================================================================

@pytest.mark.asyncio
async def test_non_2xx_raises_remote_request_error():
    repo, _ = make_repo({"/api/v1/platform/get_all": httpx.Response(503, text="unavailable")})

    with pytest.raises(RemoteRequestError) as exc_info:
        await repo.list_platforms()

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_transport_failure_raises_transport_error():
    repo, _ = make_repo({"/api/v1/config/get_os_list": httpx.ConnectError("connection refused")})

    with pytest.raises(TransportError):
        await repo.list_os("plat-1")


@pytest.mark.asyncio
async def test_unexpected_shapes_raise_remote_request_error():
    repo, _ = make_repo({
        "/api/v1/config/get_region_list": httpx.Response(200, json={"regions": []}),
        "/api/v1/resource/delete": httpx.Response(200, text="<html>"),
    })

    with pytest.raises(RemoteRequestError):
        await repo.list_regions("plat-1")
    with pytest.raises(RemoteRequestError):
        await repo.delete_resource("p-1", "r-1")


@pytest.mark.asyncio
async def test_decoding_failure_raises_transport_error():
    """본문 디코딩 실패 같은 httpx 오류도 TransportError로 감싸 서비스 계층이 처리할 수 있게 합니다."""
    repo, _ = make_repo({
        "/api/v1/project/get_all": httpx.Response(
            200,
            headers={"Content-Encoding": "gzip"},
            stream=httpx.ByteStream(b"not gzip at all"),
        ),
    })

    with pytest.raises(TransportError):
        await repo.list_projects()


@pytest.mark.asyncio
async def test_bad_record_does_not_drop_the_list():
    """잘못된 필드가 있는 레코드는 그 필드만 기본값으로 대체되고, 나머지 레코드는 그대로 유지됩니다."""
    repo, _ = make_repo({
        "/api/v1/project/get_all": httpx.Response(200, json=[
            {"id": "p-1", "name": "Alpha"},
            {"id": "p-2", "name": "Beta", "description": ["x"]},
            "not a record",
        ]),
        "/api/v1/project/get_project_resources": httpx.Response(200, json=[
            {"id": "vm-1", "name": "web", "type": "vm"},
            {"id": "vpc-1", "name": "main", "type": "vpc", "status": True},
        ]),
    })

    projects = await repo.list_projects()
    resources = await repo.list_project_resources("p-1")

    assert [p.id for p in projects] == ["p-1", "p-2"]
    assert projects[1].description == ""
    assert [r.id for r in resources] == ["vm-1", "vpc-1"]
    assert resources[1].status == ""
