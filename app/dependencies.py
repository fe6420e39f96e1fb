from typing import Annotated

from fastapi import Depends, Request

from app.services.elevenlabs import ElevenLabsGateway


def get_gateway(request: Request) -> ElevenLabsGateway:
    return request.app.state.gateway


GatewayDep = Annotated[ElevenLabsGateway, Depends(get_gateway)]
