"""Run the API with uvicorn: ``python -m plotplanner``."""

import uvicorn

from plotplanner.core.config import settings

if __name__ == "__main__":
    uvicorn.run("plotplanner:app", host=settings.host, port=settings.port, reload=False)
