"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, Request

from cropalert.services.engine import AlertEngine


def get_engine(request: Request) -> AlertEngine:
    """Return the AlertEngine built in the app lifespan."""
    return request.app.state.engine


# Type aliases for dependency injection
Engine = Annotated[AlertEngine, Depends(get_engine)]
