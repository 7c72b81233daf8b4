"""Video provider implementations.

Each provider implements the async generation pattern:
  POST create task → poll status → download result
"""

from promptreel.services.providers.base import VideoProvider
from promptreel.services.providers.kie_video import KieVideoProvider
from promptreel.services.providers.sora_video import SoraVideoProvider

__all__ = ["KieVideoProvider", "SoraVideoProvider", "VideoProvider"]
