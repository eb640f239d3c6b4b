import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import StreamingResponse
from typing import AsyncIterator, Optional
import logging

from meshy_relay.ai_clients.meshy_client import MeshyClient
from meshy_relay.schemas.text_to_3d_schemas import GenerationRequest, RefineRequest

logger = logging.getLogger(__name__)

router = APIRouter()

GLB_MEDIA_TYPE = "model/gltf-binary"

def get_meshy_client(request: Request) -> MeshyClient:
    return request.app.state.meshy_client

def get_download_chunk_size(request: Request) -> int:
    return request.app.state.settings.DOWNLOAD_CHUNK_SIZE

def relay_json(upstream: httpx.Response) -> Response:
    """Returns an upstream JSON body unmodified."""
    return Response(content=upstream.content, media_type="application/json")

def relay_upstream_error(e: httpx.HTTPStatusError) -> HTTPException:
    """Same status code as Meshy, with Meshy's body text as the error message."""
    return HTTPException(status_code=e.response.status_code, detail=e.response.text)

@router.post("/preview")
async def create_preview_task_endpoint(
    request_data: Optional[GenerationRequest] = None,
    meshy: MeshyClient = Depends(get_meshy_client),
):
    """Creates a "preview" task (mesh only) from a text prompt."""
    payload = (request_data or GenerationRequest()).to_preview_payload()
    logger.info(f"Received request for /api/preview with art_style: {payload['art_style']}, should_remesh: {payload['should_remesh']}")

    try:
        upstream = await meshy.create_text_to_3d_task(payload)
        return relay_json(upstream)
    except httpx.HTTPStatusError as e:
        raise relay_upstream_error(e)
    except Exception as e:
        logger.error(f"Error in /api/preview: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

@router.post("/refine")
async def create_refine_task_endpoint(
    request_data: Optional[RefineRequest] = None,
    meshy: MeshyClient = Depends(get_meshy_client),
):
    """Creates a "refine" task (textured model) from a completed preview task."""
    request_data = request_data or RefineRequest()
    if not request_data.preview_task_id:
        raise HTTPException(status_code=400, detail="preview_task_id is required.")

    payload = request_data.to_refine_payload()
    logger.info(f"Received request for /api/refine for preview_task_id: {payload['preview_task_id']}, enable_pbr: {payload['enable_pbr']}")

    try:
        upstream = await meshy.create_text_to_3d_task(payload)
        return relay_json(upstream)
    except httpx.HTTPStatusError as e:
        raise relay_upstream_error(e)
    except Exception as e:
        logger.error(f"Error in /api/refine: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/task/{task_id}")
async def get_task_status_endpoint(task_id: str, meshy: MeshyClient = Depends(get_meshy_client)):
    """Polls the status of any text-to-3D task (preview or refine)."""
    try:
        upstream = await meshy.get_text_to_3d_task(task_id)
        return relay_json(upstream)
    except httpx.HTTPStatusError as e:
        raise relay_upstream_error(e)
    except Exception as e:
        logger.error(f"Error in /api/task/{task_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

# --- Download pipeline: resolve the GLB URL from the task, then open the GLB stream ---

async def resolve_glb_url(meshy: MeshyClient, task_id: str) -> str:
    """Stage 1: fetches the task and returns its GLB URL if the task has succeeded."""
    try:
        upstream = await meshy.get_text_to_3d_task(task_id)
    except httpx.HTTPStatusError as e:
        logger.error(f"Failed to fetch task info for {task_id}: {e.response.text}")
        raise relay_upstream_error(e)

    task_data = upstream.json()
    if not isinstance(task_data, dict):
        task_data = {}
    if task_data.get("status") != "SUCCEEDED":
        logger.info(f"Task {task_id} not downloadable, status: {task_data.get('status')}")
        raise HTTPException(status_code=400, detail="Task is not complete or has failed.")

    model_urls = task_data.get("model_urls")
    glb_url = model_urls.get("glb") if isinstance(model_urls, dict) else None
    if not glb_url:
        logger.error(f"Task {task_id} succeeded but no GLB URL. model_urls: {model_urls}")
        raise HTTPException(status_code=404, detail="GLB URL not found.")
    return glb_url

async def open_glb_stream(meshy: MeshyClient, task_id: str, glb_url: str) -> httpx.Response:
    """Stage 2: opens the GLB file on the Meshy CDN without reading its body."""
    try:
        return await meshy.open_model_stream(glb_url)
    except httpx.HTTPStatusError as e:
        logger.error(f"Failed to download GLB for task {task_id}: {e.response.reason_phrase}")
        raise HTTPException(status_code=500, detail="Failed to download GLB file.")

async def relay_glb_bytes(model_response: httpx.Response, chunk_size: int) -> AsyncIterator[bytes]:
    """Yields the GLB body chunk by chunk and always releases the upstream connection."""
    try:
        async for chunk in model_response.aiter_bytes(chunk_size=chunk_size):
            yield chunk
    finally:
        await model_response.aclose()

@router.get("/download/{task_id}")
async def download_model_endpoint(
    task_id: str,
    meshy: MeshyClient = Depends(get_meshy_client),
    chunk_size: int = Depends(get_download_chunk_size),
):
    """
    Downloads the final GLB model of a *completed* task.
    Usually called on the refine task ID for the textured model.
    The file is streamed through chunk by chunk and never held in memory whole.
    """
    try:
        glb_url = await resolve_glb_url(meshy, task_id)
        model_response = await open_glb_stream(meshy, task_id, glb_url)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error in /api/download/{task_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Streaming GLB for task {task_id} from {glb_url}")
    return StreamingResponse(
        relay_glb_bytes(model_response, chunk_size),
        media_type=GLB_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{task_id}.glb"'},
    )
