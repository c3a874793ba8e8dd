from fastapi import APIRouter

from vital_registry.api.endpoints import (
    auth,
    birth_registrations,
    death_registrations,
    documents,
    verification,
    statistics,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(birth_registrations.router, prefix="/birth-registrations", tags=["Birth Registrations"])
api_router.include_router(death_registrations.router, prefix="/death-registrations", tags=["Death Registrations"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(verification.router, tags=["Verification"])
api_router.include_router(statistics.router, tags=["Statistics"])
