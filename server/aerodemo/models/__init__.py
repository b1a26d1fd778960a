"""Models module exporting all database models."""

from .common import RecordType, new_record_id, utcnow
from .enlistment import AviationKnowledge, Enlistment, EnlistmentStatus, YesNo
from .presentation import Presentation, PresentationStatus
from .showcase import CarouselImage, Pilot

__all__ = [
    "RecordType",
    "new_record_id",
    "utcnow",

    # Workflow records
    "Presentation",
    "PresentationStatus",
    "Enlistment",
    "EnlistmentStatus",
    "AviationKnowledge",
    "YesNo",

    # Showcase collections
    "CarouselImage",
    "Pilot",
]
