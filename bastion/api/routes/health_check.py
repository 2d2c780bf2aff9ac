from fastapi import APIRouter

from bastion.domain.base import utcnow

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "ok", "timestamp": utcnow().isoformat() + "Z"}
