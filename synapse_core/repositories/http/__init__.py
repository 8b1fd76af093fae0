from .httpx_provisioning_repository import HttpxProvisioningRepository
