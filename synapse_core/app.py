# synapse_core/app.py
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from synapse_core import config
from synapse_core.models import Project
from synapse_core.repositories.http import HttpxProvisioningRepository
from synapse_core.repositories.interfaces import IProvisioningRepository
from synapse_core.services.project_store import ProjectStore
from synapse_core.services.results import FailurePolicy

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
## 의존성 조립 (Repository -> Store)
# --------------------------------------------------------------------------

def configure_logging(level: str = config.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_store(
    repository: Optional[IProvisioningRepository] = None,
    surface_failures: bool = False,
) -> ProjectStore:
    """
    리포지토리를 만들어 주입한 ProjectStore를 생성합니다.

    Args:
        repository: 사용할 리포지토리. 없으면 설정값으로 HTTP 리포지토리를 만듭니다.
        surface_failures: True이면 생성/리소스 삭제 실패를 로컬 대체 없이 그대로 드러냅니다.
    """
    repository = repository or HttpxProvisioningRepository()
    policy = FailurePolicy.SURFACE if surface_failures else FailurePolicy.FALLBACK_LOCAL
    return ProjectStore(repository, add_project_policy=policy, remove_resource_policy=policy)

# --------------------------------------------------------------------------
## 명령 핸들러
# --------------------------------------------------------------------------

async def load_reference_data(store: ProjectStore) -> None:
    # 리전 캐시는 플랫폼 하나 단위로 채워지므로 모든 플랫폼의 리전을 모아 둡니다.
    await store.load_platforms()
    regions = []
    for platform in store.platforms:
        await store.load_regions(platform.id)
        regions.extend(store.regions)
    store.regions = regions


def summarize_project(project: Project) -> dict:
    return {
        "id": project.id,
        "name": project.name,
        "platform": project.platform,
        "region": project.region,
        "status": project.status,
        "source": project.source.value,
        "networks": len(project.networks),
        "virtual_machines": len(project.virtual_machines),
        "data_disks": len(project.data_disks),
        "security_resources": len(project.security_resources),
        "backup_resources": len(project.backup_resources),
        "storage_resources": len(project.storage_resources),
    }


async def list_projects_command(store: ProjectStore, args) -> dict:
    await load_reference_data(store)
    await store.load_projects()
    return {"error": store.error, "projects": [summarize_project(p) for p in store.projects]}


async def show_project_command(store: ProjectStore, args) -> dict:
    await load_reference_data(store)
    await store.load_projects()
    result = await store.set_selected_project(args.project_id)
    if not result.ok:
        return {"error": result.reason}
    return {"error": store.error, "project": store.selected_project.model_dump(mode="json")}


async def lookups_command(store: ProjectStore, args) -> dict:
    await store.load_vm_sizes(args.platform_id)
    await store.load_os_list(args.platform_id)
    await store.load_regions(args.platform_id)
    output = {
        "vm_sizes": [item.model_dump() for item in store.vm_sizes],
        "os_list": [item.model_dump() for item in store.os_list],
        "regions": [item.model_dump() for item in store.regions],
    }
    if args.region_id:
        await store.load_subnets(args.platform_id, args.region_id)
        await store.load_security_groups(args.platform_id, args.region_id)
        output["subnets"] = store.subnets
        output["security_groups"] = store.security_groups
    return output


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="synapse-core", description="Inspect Synapse projects.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    projects = subparsers.add_parser("projects", help="List projects with resource counts.")
    projects.set_defaults(handler=list_projects_command)

    show = subparsers.add_parser("show", help="Show one project with all classified resources.")
    show.add_argument("project_id")
    show.set_defaults(handler=show_project_command)

    lookups = subparsers.add_parser("lookups", help="Show reference data for a platform.")
    lookups.add_argument("platform_id")
    lookups.add_argument("--region-id", dest="region_id", default=None)
    lookups.set_defaults(handler=lookups_command)
    return parser


async def run(argv: Optional[List[str]] = None, repository: Optional[IProvisioningRepository] = None) -> dict:
    args = build_parser().parse_args(argv)
    store = build_store(repository)
    try:
        return await args.handler(store, args)
    finally:
        await store.repository.close()

# --------------------------------------------------------------------------
## 실행
# --------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    try:
        output = asyncio.run(run(argv))
    except Exception as e:
        logger.exception("Command failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
