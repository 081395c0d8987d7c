from fastapi import APIRouter

from crosssell.api.v1.endpoints import opportunities, scoring, segmentation, uploads

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(scoring.router, prefix="/scoring", tags=["Scoring"])
api_router.include_router(segmentation.router, prefix="/segmentation", tags=["Segmentation"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["Uploads"])
api_router.include_router(opportunities.router, prefix="/opportunities", tags=["Opportunities"])

__all__ = ["api_router"]
