"""Server-sent events stream of mirror changes."""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from salon.application.services import SSEManager
from salon.infrastructure.dependencies import get_sse_manager

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/stream")
async def mirror_change_stream(
    sse: SSEManager = Depends(get_sse_manager),
) -> StreamingResponse:
    """SSE endpoint for real-time mirror updates.

    Clients connect via EventSource and receive 'mirror_change' events
    naming the table (and row) to re-render.
    """
    return StreamingResponse(
        sse.subscribe(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
