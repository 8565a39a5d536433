"""
Mount path derivation for the stackmount application.
"""

from dataclasses import dataclass

from .config import StackMountConfig


@dataclass(frozen=True)
class MountPaths:
    """
    Paths of the two stacked layers.

    Attributes:
        host_mountpoint: Where the remote filesystem is mounted
        encrypted_path: Hidden encrypted backing directory inside the remote mount
        decrypted_path: Locally exposed decrypted view
    """

    host_mountpoint: str
    encrypted_path: str
    decrypted_path: str


def derive_paths(config: StackMountConfig) -> MountPaths:
    """Compute the mount paths for a configuration. Pure, never fails."""
    return MountPaths(
        host_mountpoint=config.host_mountpoint,
        encrypted_path=f"{config.host_mountpoint}/.{config.dir_name}",
        decrypted_path=f"{config.decrypted_mountpoint}/{config.dir_name}",
    )
