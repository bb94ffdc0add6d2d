from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    if await request.app.state.database.ping():
        return {"status": "ok"}
    return JSONResponse(status_code=503, content={"status": "unavailable"})
