"""
Notifications Router - v1.2.0
SMS contact endpoint for high-severity alerts
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from service_container import ServiceContainer, get_container

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notifications"])


class EndpointRequest(BaseModel):
    phone_number: str = Field(..., min_length=4, description="E.164, e.g. +15551234567")


class EndpointStatus(BaseModel):
    endpoint: Optional[str] = None
    sms_configured: bool


def _status(container: ServiceContainer) -> dict:
    return {
        "endpoint": container.dispatcher.endpoint,
        "sms_configured": container.dispatcher.sms.config.is_configured(),
    }


@router.get("/notifications/endpoint", response_model=EndpointStatus)
def get_endpoint(container: ServiceContainer = Depends(get_container)):
    return _status(container)


@router.put("/notifications/endpoint", response_model=EndpointStatus)
def register_endpoint(
    request: EndpointRequest, container: ServiceContainer = Depends(get_container)
):
    """Register the number that receives high-severity alert SMS"""
    container.dispatcher.register_endpoint(request.phone_number)
    return _status(container)


@router.delete("/notifications/endpoint", response_model=EndpointStatus)
def clear_endpoint(container: ServiceContainer = Depends(get_container)):
    container.dispatcher.clear_endpoint()
    return _status(container)
