from .project import Project, ProjectCreate, RecordSource
from .resources import (
    DataDisk, DataDiskCreate, Network, NetworkCreate, OSType, ProjectResource,
    ResourceCollection, VirtualMachine, VirtualMachineCreate, VmDeployConfig,
)
from .wire import (
    ApiActionResponse, ApiOS, ApiPlatform, ApiProject, ApiProjectResource,
    ApiRegion, ApiVMSize, CreateProjectRequest, DeployVmRequest,
)
