# controller/run_controller.py
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response, StreamingResponse
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from controller.controller_dependencies import get_run_service
from model.api import CommandRequest, CommandResponse, RunStateView
from service.run_service import RunService
from util.constants import InternalURIs

run_router = APIRouter()

command_limiter = RateLimiter(
    times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
)


@run_router.post(
    InternalURIs.RUN_COMMAND,
    response_model=CommandResponse,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(command_limiter)],
)
async def send_command(
    payload: CommandRequest,
    service: RunService = Depends(get_run_service),
) -> CommandResponse:
    return await service.command(payload)


@run_router.get(InternalURIs.RUN_STATE, response_model=RunStateView)
async def get_state(service: RunService = Depends(get_run_service)) -> RunStateView:
    return await service.state()


@run_router.get(InternalURIs.RUN_STREAM)
async def stream_state(
    follow: bool = Query(default=True),
    service: RunService = Depends(get_run_service),
):
    return StreamingResponse(service.stream(follow=follow), media_type="application/x-ndjson")


@run_router.get(InternalURIs.RUN_ARCHIVE)
async def download_archive(service: RunService = Depends(get_run_service)) -> Response:
    name, data = await service.archive()
    return Response(
        content=data,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{name}"'},
    )
