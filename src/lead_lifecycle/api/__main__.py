"""Run with: python -m lead_lifecycle.api"""

import uvicorn
from .main import create_default_app
from ..config import settings

if __name__ == "__main__":
    app = create_default_app()
    uvicorn.run(app, host=settings.host, port=settings.port)
