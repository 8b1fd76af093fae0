# tests/test_app.py
from unittest.mock import MagicMock

import pytest

from synapse_core.app import build_store, run
from synapse_core.models import ApiPlatform, ApiProject, ApiProjectResource, ApiRegion, ApiVMSize
from synapse_core.repositories.interfaces import IProvisioningRepository
from synapse_core.services.exceptions import TransportError
from synapse_core.services.results import FailurePolicy


@pytest.fixture
def mock_repo() -> MagicMock:
    repo = MagicMock(spec=IProvisioningRepository)
    repo.list_platforms.return_value = [ApiPlatform(id="plat-1", display_name="Azure")]
    repo.list_regions.return_value = [ApiRegion(id="reg-1", display_name="Korea Central", platform_id="plat-1")]
    repo.list_projects.return_value = [
        ApiProject(id="p-1", name="Alpha", platform_id="plat-1", region_id="reg-1"),
    ]
    repo.list_project_resources.return_value = [
        ApiProjectResource(id="vm-1", name="web", type="vm", details='{"OsType": "linux"}'),
        ApiProjectResource(id="b-1", name="vault", type="backup_vault"),
    ]
    return repo


def test_build_store_policies(mock_repo):
    assert build_store(mock_repo).add_project_policy is FailurePolicy.FALLBACK_LOCAL

    strict = build_store(mock_repo, surface_failures=True)

    assert strict.add_project_policy is FailurePolicy.SURFACE
    assert strict.remove_resource_policy is FailurePolicy.SURFACE


@pytest.mark.asyncio
async def test_projects_command_summarizes(mock_repo):
    output = await run(["projects"], repository=mock_repo)

    assert output["error"] is None
    summary = output["projects"][0]
    assert summary["platform"] == "Azure"
    assert summary["region"] == "Korea Central"
    assert summary["virtual_machines"] == 1
    assert summary["backup_resources"] == 1
    assert summary["source"] == "remote"
    mock_repo.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_projects_command_reports_sample_fallback(mock_repo):
    mock_repo.list_projects.side_effect = TransportError("connection refused")

    output = await run(["projects"], repository=mock_repo)

    assert "connection refused" in output["error"]
    assert output["projects"][0]["source"] == "sample"


@pytest.mark.asyncio
async def test_show_command(mock_repo):
    output = await run(["show", "p-1"], repository=mock_repo)

    assert output["project"]["id"] == "p-1"
    assert output["project"]["region"] == "Korea Central"
    assert output["project"]["virtual_machines"][0]["os"] == "Ubuntu"


@pytest.mark.asyncio
async def test_show_unknown_project(mock_repo):
    output = await run(["show", "nope"], repository=mock_repo)

    assert "not found" in output["error"]


@pytest.mark.asyncio
async def test_lookups_command(mock_repo):
    mock_repo.list_vm_sizes.return_value = [ApiVMSize(id="s-1", Display_name="Small")]
    mock_repo.list_os.return_value = []
    mock_repo.list_regions.return_value = []
    mock_repo.list_subnets.return_value = [{"id": "subnet-1"}]
    mock_repo.list_security_groups.side_effect = TransportError("down")

    output = await run(["lookups", "plat-1", "--region-id", "reg-1"], repository=mock_repo)

    assert output["vm_sizes"][0]["display_name"] == "Small"
    assert output["subnets"] == [{"id": "subnet-1"}]
    assert output["security_groups"] == []
