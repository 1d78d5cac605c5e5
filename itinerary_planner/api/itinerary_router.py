from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from itinerary_planner.data.models import ItineraryRequest
from itinerary_planner.services.itinerary_service import ItineraryService

router = APIRouter(prefix="/api/itinerary", tags=["Itinerary"])


def get_itinerary_service() -> ItineraryService:
    return ItineraryService()


@router.post("")
async def create_itinerary(
    request: ItineraryRequest,
    service: ItineraryService = Depends(get_itinerary_service),
):
    """
    Generate a day-by-day itinerary, streamed as plain text.

    The body is the model's JSON itinerary, delivered incrementally.
    Failures before generation starts are answered with ``{"error": ...}``.
    """
    stream = await service.plan(request)
    return StreamingResponse(stream, media_type="text/plain; charset=utf-8")
