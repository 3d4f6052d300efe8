from .step_10_resolve_gpg_key import ResolveGpgKeyStep
from .step_20_install_packages import InstallPackagesStep
from .step_30_install_gcm import InstallGcmStep
from .step_40_configure_pinentry import ConfigurePinentryStep
from .step_50_init_pass import InitPassStep
from .step_60_mask_services import MaskServicesStep
from .step_70_shell_hooks import ShellHooksStep
from .step_80_credential_store import CredentialStoreStep
from .step_90_pass_entries import PassEntriesStep
from .step_95_post_install_check import PostInstallCheckStep

__all__ = [
    "ResolveGpgKeyStep",
    "InstallPackagesStep",
    "InstallGcmStep",
    "ConfigurePinentryStep",
    "InitPassStep",
    "MaskServicesStep",
    "ShellHooksStep",
    "CredentialStoreStep",
    "PassEntriesStep",
    "PostInstallCheckStep",
]
