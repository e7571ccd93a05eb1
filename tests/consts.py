"""Constant values used for tests."""

from pathlib import Path

THIS_DIR = Path(__file__).parent
PROJECT_DIR = (THIS_DIR / "../").resolve()

# Base path for all API routes; must match main.py include_router(..., prefix="/api")
API_BASE = "/api"

# Request body accepted by POST /api/requests
SAMPLE_REQUEST_BODY = {
    "requester_role": "caregiver",
    "patient_name": "Amina Wanjiru",
    "pickup": "Kibera Village 4",
    "destination": "Mbagathi District Hospital",
    "distance_km": 8,
    "urgency": "high",
    "payment_method": "sha_loan",
}
