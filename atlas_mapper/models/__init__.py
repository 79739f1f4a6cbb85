"""Domain models for the atlas coordinate mapper.

Points are the pipeline's output records; the remaining models describe how a
materialization pass resolved its columns, what it dropped, and how it went.
"""

from .drop_record import DropRecord
from .header_mapping import HeaderCandidates, HeaderMapping
from .materialize_result import ChunkStatsAccumulator, MaterializeResult, MaterializeStats
from .point import CoordinatePair, NormalizedPoint

__all__ = [
    # Output records
    "CoordinatePair",
    "NormalizedPoint",
    # Pass bookkeeping
    "ChunkStatsAccumulator",
    "DropRecord",
    "HeaderCandidates",
    "HeaderMapping",
    "MaterializeResult",
    "MaterializeStats",
]
