from fastapi import APIRouter

from laburoya.api.v1.endpoints import admin, auth, catalog, chats, employers, job_offers, matches, workers

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(workers.router, prefix="/workers", tags=["workers"])
api_router.include_router(employers.router, prefix="/employers", tags=["employers"])
api_router.include_router(job_offers.router, prefix="/job-offers", tags=["job-offers"])
api_router.include_router(matches.router, prefix="/matches", tags=["matches"])
api_router.include_router(chats.router, prefix="/chats", tags=["chats"])
api_router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
