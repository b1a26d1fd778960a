"""Read-only showcase collections for the public pages."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dependencies import Store
from ..models import CarouselImage as CarouselRecord
from ..models import Pilot as PilotRecord
from ..schemas.showcase import CarouselImage, CarouselList, Pilot, PilotList
from ..services.record_store import RecordStore, showcase_listing

router = APIRouter(prefix="/v1/showcase", tags=["showcase"])


@router.post("/carousel", response_model=CarouselList)
async def list_carousel(store: RecordStore = Store) -> JSONResponse:
    """Carousel images in display order."""
    records = await store.list_records(showcase_listing(CarouselRecord))
    listing = CarouselList(items=[CarouselImage.model_validate(r) for r in records])
    return JSONResponse(status_code=200, content=listing.model_dump(mode="json", by_alias=True))


@router.post("/pilots", response_model=PilotList)
async def list_pilots(store: RecordStore = Store) -> JSONResponse:
    """Pilot roster in display order."""
    records = await store.list_records(showcase_listing(PilotRecord))
    listing = PilotList(items=[Pilot.model_validate(r) for r in records])
    return JSONResponse(status_code=200, content=listing.model_dump(mode="json", by_alias=True))
