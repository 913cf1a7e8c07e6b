# Models package init
"""
Importing this package registers every table with Base.metadata
(used by database.create_all, Alembic and the test fixtures).
"""

from tourstack.models.museum import Museum
from tourstack.models.template import Template
from tourstack.models.stop import Stop
from tourstack.models.tour import Tour
from tourstack.models.media import Media
from tourstack.models.generated_audio import GeneratedAudio

__all__ = ["Museum", "Template", "Stop", "Tour", "Media", "GeneratedAudio"]
