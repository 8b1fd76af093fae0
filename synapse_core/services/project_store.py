# synapse_core/services/project_store.py
import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, List, Optional, Union

from synapse_core import config
from synapse_core.models import (
    ApiActionResponse, ApiOS, ApiPlatform, ApiProject, ApiProjectResource,
    ApiRegion, ApiVMSize, CreateProjectRequest, DataDisk, DataDiskCreate,
    DeployVmRequest, Network, NetworkCreate, Project, ProjectCreate,
    RecordSource, ResourceCollection, VirtualMachine, VirtualMachineCreate,
    VmDeployConfig,
)
from synapse_core.repositories.interfaces import IProvisioningRepository
from synapse_core.services.exceptions import ProvisioningError, RemoteOperationError
from synapse_core.services.resource_classifier import classify, classify_resources
from synapse_core.services.results import FailurePolicy, OperationResult
from synapse_core.services.sample_data import sample_project
from synapse_core.utils.local_ids import new_local_id

logger = logging.getLogger(__name__)

PENDING_STATUS = "Pending"
LOOKUP_CACHES = ("platforms", "regions", "vm_sizes", "os_list", "subnets", "security_groups")


class ProjectStore:
    """
    대시보드의 프로젝트 상태를 소유하고 원격 API와의 동기화를 조율하는 상태 컨테이너입니다.

    전역 싱글턴이 아니며, 사용하는 쪽에 리포지토리와 함께 생성하여 주입합니다.
    모든 연산은 성공, 원격 실패, 부분 실패 어느 경로로 끝나더라도 상태를 완전한 형태로
    남기고 OperationResult를 반환합니다.
    """

    def __init__(
        self,
        repository: IProvisioningRepository,
        add_project_policy: FailurePolicy = FailurePolicy.FALLBACK_LOCAL,
        remove_resource_policy: FailurePolicy = FailurePolicy.FALLBACK_LOCAL,
        customer_id: str = config.CUSTOMER_ID,
    ):
        """
        ProjectStore를 초기화합니다.

        Args:
            repository: 원격 프로비저닝 API에 접근하기 위한 리포지토리.
            add_project_policy: 프로젝트 생성 실패 시 로컬 프로젝트로 대체할지 여부.
            remove_resource_policy: 리소스 삭제 실패 시에도 로컬에서 제거할지 여부.
            customer_id: 프로젝트 생성 요청에 담을 고객 ID.
        """
        self.repository = repository
        self.add_project_policy = add_project_policy
        self.remove_resource_policy = remove_resource_policy
        self.customer_id = customer_id

        self.projects: List[Project] = []
        self.selected_project: Optional[Project] = None
        self.error: Optional[str] = None

        # 조회용 참조 데이터. 비어 있으면 "아직 모름"으로 취급해야 합니다.
        self.platforms: List[ApiPlatform] = []
        self.regions: List[ApiRegion] = []
        self.vm_sizes: List[ApiVMSize] = []
        self.os_list: List[ApiOS] = []
        self.subnets: List[dict] = []
        self.security_groups: List[dict] = []

        self._in_flight = 0
        self._selection_generation = 0

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @contextmanager
    def _track_loading(self):
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1

    def get_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def clear_error(self) -> None:
        self.error = None

    def find_lookup(self, cache: str, item_id: str) -> Optional[Any]:
        """참조 캐시(platforms, regions, subnets 등)에서 ID로 항목을 찾습니다. 없으면 None."""
        if cache not in LOOKUP_CACHES:
            raise ValueError(f"Unknown lookup cache '{cache}'.")
        for item in getattr(self, cache):
            value = item.get("id") if isinstance(item, dict) else getattr(item, "id", None)
            if value == item_id:
                return item
        return None

    # --------------------------------------------------------------------------
    ## 프로젝트 목록
    # --------------------------------------------------------------------------

    async def load_projects(self) -> OperationResult:
        """
        프로젝트 목록과 각 프로젝트의 리소스를 불러와 projects를 통째로 교체합니다.

        리소스 조회는 프로젝트별로 동시에 수행합니다. 한 프로젝트의 리소스 조회가 실패하면
        그 프로젝트만 리소스 없이 분류합니다. 목록 조회 자체가 실패하면 error를 설정하고
        고정된 샘플 프로젝트 하나로 대체합니다.

        Returns:
            성공 시 Ok(projects), 목록 조회 실패 시 fallback=True인 Err.
        """
        with self._track_loading():
            try:
                api_projects = await self.repository.list_projects()
            except ProvisioningError as e:
                logger.warning("Failed to load projects, falling back to sample data: %s", e)
                self.error = f"Failed to load projects: {e}"
                self.projects = [sample_project()]
                self._rebind_selection()
                return OperationResult.failure(self.error, value=self.projects, fallback=True)

            resource_lists = await asyncio.gather(
                *(self._fetch_resources(project.id) for project in api_projects)
            )

        self.projects = [
            classify(project, resources, self.platforms, self.regions)
            for project, resources in zip(api_projects, resource_lists)
        ]
        self.error = None
        self._rebind_selection()
        logger.info("Loaded %d projects", len(self.projects))
        return OperationResult.success(self.projects)

    async def _fetch_resources(self, project_id: str) -> List[ApiProjectResource]:
        try:
            return await self.repository.list_project_resources(project_id)
        except ProvisioningError as e:
            logger.warning("Failed to load resources for project %s: %s", project_id, e)
            return []

    def _rebind_selection(self) -> None:
        # 목록이 교체되면 선택된 프로젝트도 새 인스턴스를 가리키도록 맞춥니다.
        if self.selected_project is not None:
            self.selected_project = self.get_project(self.selected_project.id)

    async def add_project(self, data: ProjectCreate) -> OperationResult:
        """
        원격에 프로젝트 생성을 요청하고, 성공하면 목록 전체를 다시 불러옵니다.

        원격 호출이 실패하면 기본 정책(FALLBACK_LOCAL)에서는 로컬 ID를 가진 프로젝트를
        목록에 추가하고 error를 지웁니다. 이 경우 결과는 Ok이지만 fallback=True이며
        reason에 감춰진 실패 원인이 담깁니다.
        """
        request = CreateProjectRequest(
            customer_id=self.customer_id,
            platform_id=data.platform_id,
            region_id=data.region_id,
            project_name=data.name,
            project_type=data.project_type,
            owner=data.owner,
            billing_org=data.billing_organization,
            description=data.description,
        )
        with self._track_loading():
            try:
                response = await self.repository.create_project(request)
                _ensure_success(response, "create project")
            except ProvisioningError as e:
                return self._handle_add_project_failure(data, e)

        # 원격이 기준이므로 병합하지 않고 전체를 다시 동기화합니다.
        return await self.load_projects()

    def _handle_add_project_failure(self, data: ProjectCreate, error: ProvisioningError) -> OperationResult:
        if self.add_project_policy is FailurePolicy.SURFACE:
            self.error = f"Failed to create project: {error}"
            return OperationResult.failure(self.error)

        # TODO: 로컬로만 존재하는 프로젝트를 나중에 원격에 다시 생성 요청하는 재동기화 경로 추가
        logger.warning("Project creation failed remotely, keeping a local copy of '%s': %s", data.name, error)
        raw = ApiProject(
            id=new_local_id("project"),
            customer_id=self.customer_id,
            platform_id=data.platform_id,
            region_id=data.region_id,
            name=data.name,
            description=data.description,
            owner=data.owner,
            billing_org=data.billing_organization,
            project_type=data.project_type,
        )
        project = classify(raw, [], self.platforms, self.regions).model_copy(
            update={"source": RecordSource.LOCAL}
        )
        self.projects = [*self.projects, project]
        self.error = None
        return OperationResult.success(project, fallback=True, reason=str(error))

    async def delete_project(self, project_id: str) -> OperationResult:
        """
        원격에서 프로젝트를 삭제합니다. 성공 응답일 때만 로컬 상태에서 제거합니다.

        실패하면 error만 설정하고 projects와 selected_project는 그대로 둡니다.
        """
        with self._track_loading():
            try:
                response = await self.repository.delete_project(project_id)
                _ensure_success(response, "delete project")
            except ProvisioningError as e:
                logger.warning("Failed to delete project %s: %s", project_id, e)
                self.error = f"Failed to delete project: {e}"
                return OperationResult.failure(self.error)

        self.projects = [p for p in self.projects if p.id != project_id]
        if self.selected_project is not None and self.selected_project.id == project_id:
            self.selected_project = None
        self.error = None
        return OperationResult.success(project_id)

    async def set_selected_project(self, project_id: str) -> OperationResult:
        """
        이미 목록에 있는 프로젝트를 즉시 선택하고, 이어서 리소스를 다시 불러와 갱신합니다.

        리소스 재조회가 실패해도 처음 선택한 프로젝트는 그대로 유지합니다.
        재조회가 끝나기 전에 다른 프로젝트가 선택되었거나 삭제되었다면 그 응답은 버립니다.
        로컬/샘플 프로젝트는 원격에 존재하지 않으므로 재조회하지 않습니다.
        """
        self._selection_generation += 1
        generation = self._selection_generation

        project = self.get_project(project_id)
        self.selected_project = project
        if project is None:
            return OperationResult.failure(f"Project '{project_id}' not found.")
        if not project.is_authoritative:
            return OperationResult.success(project)

        try:
            resources = await self.repository.list_project_resources(project_id)
        except ProvisioningError as e:
            logger.warning("Failed to refresh resources for project %s: %s", project_id, e)
            return OperationResult.success(project, reason=str(e))

        current = self.selected_project
        if generation != self._selection_generation or current is None or current.id != project_id:
            logger.debug("Discarding stale resource refresh for project %s", project_id)
            return OperationResult.success(current)

        refreshed = current.model_copy(update=classify_resources(resources).as_update())
        self.selected_project = refreshed
        self.projects = [refreshed if p.id == project_id else p for p in self.projects]
        return OperationResult.success(refreshed)

    # --------------------------------------------------------------------------
    ## 리소스 변경
    # --------------------------------------------------------------------------

    def add_network(self, project_id: str, data: NetworkCreate) -> OperationResult:
        """네트워크를 로컬에만 추가합니다. (원격 API에 해당 엔드포인트가 없음)"""
        network = Network(id=new_local_id("net"), name=data.name, subnets=list(data.subnets))
        if self._update_collection(project_id, "networks", lambda items: [*items, network]) is None:
            return OperationResult.failure(f"Project '{project_id}' not found.")
        return OperationResult.success(network)

    def add_data_disk(self, project_id: str, data: DataDiskCreate) -> OperationResult:
        """데이터 디스크를 로컬에만 추가합니다."""
        disk = DataDisk(id=new_local_id("disk"), name=data.name, size=data.size)
        if self._update_collection(project_id, "data_disks", lambda items: [*items, disk]) is None:
            return OperationResult.failure(f"Project '{project_id}' not found.")
        return OperationResult.success(disk)

    async def add_virtual_machine(
        self, project_id: str, data: VirtualMachineCreate, deploy_config: VmDeployConfig
    ) -> OperationResult:
        """
        원격에 VM 배포를 요청하고, 요청이 접수되면 Pending 상태의 VM을 로컬에 추가합니다.

        배포 결과는 동기적으로 알 수 없으므로 호출자가 넘긴 status와 관계없이 항상
        Pending으로 추가합니다. 원격 호출이 실패하면 error를 설정하고 VM을 추가하지 않습니다.

        Args:
            project_id: VM을 배포할 프로젝트의 ID.
            data: 화면에 표시할 VM 정보.
            deploy_config: 인스턴스 타입, OS, 서브넷, 보안 그룹 등 플랫폼 측 식별자.
        """
        project = self.get_project(project_id)
        if project is None:
            self.error = f"Project '{project_id}' not found."
            return OperationResult.failure(self.error)
        if not project.platform_id:
            self.error = f"Project '{project_id}' has no platform; cannot deploy a virtual machine."
            return OperationResult.failure(self.error)

        request = DeployVmRequest(
            project_id=project_id,
            name=data.name,
            instance_type=deploy_config.instance_type_id,
            os_id=deploy_config.os_id,
            public_ip=_flag(deploy_config.public_ip),
            data_disk=_flag(deploy_config.data_disk),
            data_disk_size=(
                str(deploy_config.data_disk_size)
                if deploy_config.data_disk and deploy_config.data_disk_size is not None else None
            ),
            key_pair=deploy_config.key_pair,
            subnet_id=deploy_config.subnet_id or "",
            security_group_id=deploy_config.security_group_id or "",
            platform_id=project.platform_id,
        )

        with self._track_loading():
            try:
                await self.repository.deploy_vm(request)
            except ProvisioningError as e:
                logger.warning("Failed to deploy virtual machine '%s': %s", data.name, e)
                self.error = f"Failed to deploy virtual machine: {e}"
                return OperationResult.failure(self.error)

        vm = VirtualMachine(
            id=new_local_id("vm"),
            name=data.name,
            network_id=data.network_id or request.subnet_id,
            status=PENDING_STATUS,
            type=data.type or deploy_config.instance_type_id,
            os=data.os,
            cpu=data.cpu,
            ram=data.ram,
            disk_size=data.disk_size,
        )
        self._update_collection(project_id, "virtual_machines", lambda items: [*items, vm])
        self.error = None
        return OperationResult.success(vm)

    async def remove_resource(
        self, project_id: str, collection: Union[ResourceCollection, str], resource_id: str
    ) -> OperationResult:
        """
        원격 삭제를 시도한 뒤, 결과와 관계없이 로컬 컬렉션에서 엔티티를 제거합니다.

        원격 호출의 실패나 예외는 로그로만 남깁니다. remove_resource_policy가 SURFACE이면
        원격 실패 시 error를 설정하고 엔티티를 남겨둡니다.

        Raises:
            ValueError: collection이 알 수 없는 컬렉션 이름일 때.
        """
        collection = ResourceCollection(collection)

        remote_error: Optional[Exception] = None
        try:
            response = await self.repository.delete_resource(project_id, resource_id)
            _ensure_success(response, "delete resource")
        except Exception as e:
            remote_error = e
            logger.warning("Remote delete of %s %s failed: %s", collection.value, resource_id, e)

        if remote_error is not None and self.remove_resource_policy is FailurePolicy.SURFACE:
            self.error = f"Failed to delete resource: {remote_error}"
            return OperationResult.failure(self.error)

        self._update_collection(
            project_id,
            collection.attribute,
            lambda items: [item for item in items if item.id != resource_id],
        )
        if remote_error is None:
            return OperationResult.success(resource_id)
        return OperationResult.success(resource_id, fallback=True, reason=str(remote_error))

    def _update_collection(
        self, project_id: str, attribute: str, transform: Callable[[list], list]
    ) -> Optional[Project]:
        # 프로젝트를 새 인스턴스로 교체하고, 선택된 프로젝트라면 같이 반영합니다.
        for index, project in enumerate(self.projects):
            if project.id != project_id:
                continue
            updated = project.model_copy(update={attribute: transform(getattr(project, attribute))})
            self.projects = [*self.projects[:index], updated, *self.projects[index + 1:]]
            if self.selected_project is not None and self.selected_project.id == project_id:
                self.selected_project = updated
            return updated
        return None

    # --------------------------------------------------------------------------
    ## 조회용 참조 데이터
    # --------------------------------------------------------------------------

    async def load_platforms(self) -> OperationResult:
        return await self._load_lookup("platforms", self.repository.list_platforms)

    async def load_regions(self, platform_id: str) -> OperationResult:
        return await self._load_lookup("regions", self.repository.list_regions, platform_id)

    async def load_vm_sizes(self, platform_id: str) -> OperationResult:
        return await self._load_lookup("vm_sizes", self.repository.list_vm_sizes, platform_id)

    async def load_os_list(self, platform_id: str) -> OperationResult:
        return await self._load_lookup("os_list", self.repository.list_os, platform_id)

    async def load_subnets(self, platform_id: str, region_id: str) -> OperationResult:
        return await self._load_lookup("subnets", self.repository.list_subnets, platform_id, region_id)

    async def load_security_groups(self, platform_id: str, region_id: str) -> OperationResult:
        return await self._load_lookup(
            "security_groups", self.repository.list_security_groups, platform_id, region_id
        )

    async def _load_lookup(
        self, attribute: str, fetch: Callable[..., Awaitable[List[Any]]], *args: str
    ) -> OperationResult:
        try:
            items = await fetch(*args)
        except ProvisioningError as e:
            # 오래된 값을 남기지 않고 비웁니다.
            logger.warning("Failed to load %s: %s", attribute, e)
            setattr(self, attribute, [])
            return OperationResult.failure(str(e), value=[])
        setattr(self, attribute, list(items))
        return OperationResult.success(getattr(self, attribute))


def _ensure_success(response: ApiActionResponse, action: str) -> None:
    if response is None or response.status != config.SUCCESS_STATUS:
        status = getattr(response, "status", "")
        message = getattr(response, "message", "") or f"Could not {action} (status: {status or 'none'})."
        raise RemoteOperationError(message, status=status)


def _flag(value: bool) -> str:
    return "true" if value else "false"
