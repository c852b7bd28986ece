import logging

import uvicorn
from simap.config import settings

if __name__ == "__main__":
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    # Start the API server
    print(f"Social Identity Map server running at http://{settings.API_HOST}:{settings.API_PORT}")
    uvicorn.run(
        "simap.main:app", 
        host=settings.API_HOST, 
        port=settings.API_PORT, 
        reload=settings.API_RELOAD
    )
