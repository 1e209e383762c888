"""Channel transfer API routes. All of them require the X-API-Secret header."""

import logging
import traceback
from typing import Optional, Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from channel_escrow.adapters.web.dependencies import Services, get_services, verify_secret
from channel_escrow.domain.models import TransferRequest
from channel_escrow.errors import PreconditionError, TransferFailed, ValidationError

logger = logging.getLogger(__name__)

transfer_router = APIRouter(prefix="/api", tags=["Transfer"], dependencies=[Depends(verify_secret)])


class ChannelRequest(BaseModel):
    channelUsername: Optional[str] = None


class TransferOwnershipRequest(BaseModel):
    jobId: Optional[Union[int, str]] = None
    channelUsername: Optional[str] = None
    buyerUsername: Optional[str] = None


def _require_channel(req: Optional[ChannelRequest]) -> str:
    channel = (req.channelUsername or "").strip() if req else ""
    if not channel:
        raise ValidationError("channelUsername is required")
    return channel


@transfer_router.post("/join-channel")
async def join_channel(req: Optional[ChannelRequest] = None, services: Services = Depends(get_services)):
    channel = _require_channel(req)
    logger.info("Join channel request: %s", channel)
    try:
        result = await services.orchestrator.gate.ensure_member(channel)
    except Exception as e:
        logger.exception("Error joining %s", channel)
        return JSONResponse(status_code=500, content={"error": str(e)})
    return result.to_dict()


@transfer_router.post("/check-ownership")
async def check_ownership(req: Optional[ChannelRequest] = None, services: Services = Depends(get_services)):
    channel = _require_channel(req)
    logger.info("Check ownership request: %s", channel)
    try:
        check = await services.orchestrator.classifier.classify(channel)
    except Exception as e:
        logger.exception("Error checking ownership of %s", channel)
        return JSONResponse(
            status_code=500,
            content={"error": str(e), "isOwner": False, "currentRole": f"error: {e}"},
        )
    return check.to_dict()


@transfer_router.post("/transfer-ownership")
async def transfer_ownership(
    req: Optional[TransferOwnershipRequest] = None,
    services: Services = Depends(get_services),
):
    req = req or TransferOwnershipRequest()
    request = TransferRequest(
        job_id=str(req.jobId) if req.jobId is not None else None,
        channel_username=req.channelUsername,
        buyer_username=req.buyerUsername,
    )
    logger.info(
        "Transfer ownership request: job=%s channel=%s buyer=%s",
        req.jobId, req.channelUsername, req.buyerUsername,
    )
    try:
        run = await services.orchestrator.run(request)
    except TransferFailed as e:
        cause = e.cause
        if isinstance(cause, PreconditionError):
            return JSONResponse(
                status_code=400,
                content={
                    "error": "Transfer not ready",
                    "details": cause.check.to_dict(),
                    "instruction": cause.instruction,
                },
            )
        body = {
            "error": str(cause),
            "failedStep": e.run.failed_state.value if e.run.failed_state else None,
            "ownershipTransferred": e.run.ownership_moved,
        }
        if services.config.expose_error_stack:
            body["stack"] = "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))
        return JSONResponse(status_code=500, content=body)

    return {
        "success": True,
        "message": "Ownership transferred successfully",
        "jobId": req.jobId,
        "transferComplete": True,
        "steps": run.steps.to_dict(),
    }
