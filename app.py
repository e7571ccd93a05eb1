"""ASGI entry point.

Process managers look for an 'app' variable in the application module.
This module provides the FastAPI application instance.

Usage:
    - Deployed: uvicorn app:app --host 0.0.0.0 --port 8000
    - Local: uvicorn app:app --reload
"""

import sys
from pathlib import Path

# Add src to Python path for imports (MUST be before importing medride_api)
src_path = Path(__file__).parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

# Now import and create the app
from medride_api.main import create_app

app = create_app()
