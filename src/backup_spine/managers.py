"""Instance-manager and platform-manager resolution.

A service plan names the backend that provisions its instances; the
instance's platform context names the wrapper that talks to the platform.
Both are a fixed, small set of variants, so resolution is an enum-keyed
table over typed variants rather than loading modules by name.

    plan.manager_name ──► ManagerType ──► DirectorManager
                                          DockerManager      (swarm only)
                                          VirtualHostManager

    context.platform  ──► PlatformType ──► PlatformManager
          (aliases: cf, k8s)          └──► BasePlatformManager (fallback)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from backup_spine.core.errors import InvalidConfigError
from backup_spine.core.settings import BackupSettings, get_settings


class ManagerType(str, Enum):
    """Provisioning backends a plan can name."""

    DIRECTOR = "director"
    DOCKER = "docker"
    VIRTUAL_HOST = "virtual_host"


@dataclass(frozen=True)
class PlanSpec:
    """The parts of a service plan manager resolution needs."""

    plan_id: str
    service_id: str
    manager_name: str
    backup_interval: str | None = None


@dataclass(frozen=True)
class DirectorManager:
    plan: PlanSpec
    manager_type: ManagerType = ManagerType.DIRECTOR


@dataclass(frozen=True)
class DockerManager:
    plan: PlanSpec
    manager_type: ManagerType = ManagerType.DOCKER


@dataclass(frozen=True)
class VirtualHostManager:
    plan: PlanSpec
    manager_type: ManagerType = ManagerType.VIRTUAL_HOST


InstanceManager = Union[DirectorManager, DockerManager, VirtualHostManager]

_MANAGERS: dict[ManagerType, type] = {
    ManagerType.DIRECTOR: DirectorManager,
    ManagerType.DOCKER: DockerManager,
    ManagerType.VIRTUAL_HOST: VirtualHostManager,
}


def create_manager(
    plan: PlanSpec,
    settings: BackupSettings | None = None,
) -> InstanceManager:
    """Instance manager for a plan.

    Raises:
        InvalidConfigError: unknown manager name, or docker while the swarm
            manager is disabled.
    """
    settings = settings or get_settings()
    try:
        manager_type = ManagerType(plan.manager_name)
    except ValueError:
        raise InvalidConfigError(
            "manager.name",
            plan.manager_name,
            f"Unknown manager {plan.manager_name!r}, expected one of "
            f"{[t.value for t in ManagerType]}",
        ) from None

    if manager_type == ManagerType.DOCKER and not settings.enable_swarm_manager:
        raise InvalidConfigError(
            "manager.name",
            plan.manager_name,
            "Docker manager requires enable_swarm_manager",
        )
    return _MANAGERS[manager_type](plan)


# ---------------------------------------------------------------------------
# Platform managers
# ---------------------------------------------------------------------------


class PlatformType(str, Enum):
    """Platforms with a dedicated wrapper."""

    CLOUDFOUNDRY = "cloudfoundry"
    KUBERNETES = "kubernetes"


PLATFORM_ALIASES: dict[str, PlatformType] = {
    "cf": PlatformType.CLOUDFOUNDRY,
    "k8s": PlatformType.KUBERNETES,
}


@dataclass(frozen=True)
class PlatformManager:
    """Wrapper for a platform with a dedicated implementation."""

    platform: str
    platform_type: PlatformType


@dataclass(frozen=True)
class BasePlatformManager:
    """Default wrapper for platforms without a dedicated implementation."""

    platform: str | None


def resolve_platform(platform: str | None) -> PlatformType | None:
    if not platform:
        return None
    try:
        return PlatformType(platform)
    except ValueError:
        return PLATFORM_ALIASES.get(platform)


def get_platform_manager(platform: str | None) -> PlatformManager | BasePlatformManager:
    platform_type = resolve_platform(platform)
    if platform_type is None:
        return BasePlatformManager(platform)
    return PlatformManager(platform, platform_type)


__all__ = [
    "ManagerType",
    "PlanSpec",
    "DirectorManager",
    "DockerManager",
    "VirtualHostManager",
    "InstanceManager",
    "create_manager",
    "PlatformType",
    "PLATFORM_ALIASES",
    "PlatformManager",
    "BasePlatformManager",
    "resolve_platform",
    "get_platform_manager",
]
