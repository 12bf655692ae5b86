from fastapi import APIRouter

from ..core.session import utc_timestamp
from ..models import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(timestamp=utc_timestamp(), message="SiteBuilder relay is running!")
