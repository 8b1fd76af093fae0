from .provisioning import IProvisioningRepository
