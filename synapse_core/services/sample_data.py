# synapse_core/services/sample_data.py
from synapse_core.models import (
    DataDisk, Network, OSType, Project, RecordSource, VirtualMachine,
)


def sample_project() -> Project:
    """
    프로젝트 목록을 불러오지 못했을 때 화면에 보여줄 고정된 데모 프로젝트를 만듭니다.

    이전 상태의 캐시가 아니라 항상 같은 내용의 샘플이며, source가 SAMPLE로 표시됩니다.
    호출할 때마다 새 객체를 반환하므로 스토어에서 변경해도 다른 호출에 영향이 없습니다.
    """
    return Project(
        id="1",
        name="Sample Cloud Project",
        description="A sample cloud infrastructure project",
        platform="AWS",
        region="us-east-1",
        project_type="default",
        billing_organization="Demo Organization",
        owner="Synapse User",
        status="Active",
        networks=[
            Network(id="net-1", name="Main VPC", subnets=["10.0.0.0/24", "10.0.1.0/24"]),
        ],
        virtual_machines=[
            VirtualMachine(
                id="vm-1",
                name="Web Server",
                network_id="net-1",
                status="Active",
                type="t2.micro",
                os=OSType.UBUNTU,
                cpu="2 vCPU",
                ram="4 GB",
                disk_size=100,
            ),
        ],
        data_disks=[
            DataDisk(id="disk-1", name="Database Storage", size=500),
        ],
        source=RecordSource.SAMPLE,
    )
