from fastapi import APIRouter
from bloodbank.api.endpoints import auth, profile, users, blood_banks, blood_units, blood_requests, appointments

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(blood_banks.router, prefix="/blood-banks", tags=["blood-banks"])
api_router.include_router(blood_units.router, prefix="/blood-units", tags=["blood-units"])
api_router.include_router(blood_requests.router, prefix="/blood-requests", tags=["blood-requests"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
