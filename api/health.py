from fastapi import APIRouter

router = APIRouter(tags=["health"])

API_NAME = "GTC Govrnance API"
API_VERSION = "v1.0"


@router.get("/")
def describe():
    """Name and version of this gateway."""
    return {"name": API_NAME, "version": API_VERSION}


@router.get("/health")
def health_check():
    """Check if server is running."""
    return {"status": "healthy"}
