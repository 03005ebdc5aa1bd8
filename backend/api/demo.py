"""Demo job generator control routes."""
from fastapi import APIRouter, Depends

from api.deps import get_demo_generator
from schemas.jobs import DemoStatus
from services.demo import DemoJobGenerator

router = APIRouter(tags=["demo"])


@router.post("/demo/start", response_model=DemoStatus)
async def start_demo(demo: DemoJobGenerator = Depends(get_demo_generator)) -> DemoStatus:
    demo.start()
    return DemoStatus(running=demo.is_running, status="started")


@router.post("/demo/stop", response_model=DemoStatus)
async def stop_demo(demo: DemoJobGenerator = Depends(get_demo_generator)) -> DemoStatus:
    await demo.stop()
    return DemoStatus(running=demo.is_running, status="stopped")


@router.get("/demo/status", response_model=DemoStatus)
def demo_status(demo: DemoJobGenerator = Depends(get_demo_generator)) -> DemoStatus:
    return DemoStatus(running=demo.is_running)
