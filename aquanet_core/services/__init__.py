"""领域服务。"""

from aquanet_core.services.aquaculture import AquacultureService

__all__ = ["AquacultureService"]
