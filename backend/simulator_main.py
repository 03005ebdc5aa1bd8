"""Vehicle simulator entrypoint: runs VEHICLE_COUNT simulated vehicles until SIGINT/SIGTERM."""
import asyncio
import logging
import signal

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logging.getLogger("httpx").setLevel(logging.WARNING)

from simulator_core.clients import FleetServiceClient, JobServiceClient
from simulator_core.routing import RoutingService
from simulator_core.runner import FleetSimulator
from utils.config import (
    DEMO_SPEED,
    FLEET_SERVICE_URL,
    JOB_SERVICE_URL,
    REGION,
    ROUTING_URL,
    STARTUP_DELAY_S,
    TELEMETRY_URL,
    TICK_INTERVAL_S,
    VEHICLE_COUNT,
)
from utils.telemetry import build_telemetry_sink

LOG = logging.getLogger("simulator")


async def main() -> None:
    LOG.info(
        "Starting %d vehicle(s) in %s (fleet %s, jobs %s)",
        VEHICLE_COUNT,
        REGION,
        FLEET_SERVICE_URL,
        JOB_SERVICE_URL,
    )
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    if STARTUP_DELAY_S > 0:
        LOG.info("Waiting %.0fs for the fleet service to come up", STARTUP_DELAY_S)
        try:
            await asyncio.wait_for(stop.wait(), timeout=STARTUP_DELAY_S)
        except asyncio.TimeoutError:
            pass
        if stop.is_set():
            return

    fleet_client = FleetServiceClient(FLEET_SERVICE_URL)
    job_client = JobServiceClient(JOB_SERVICE_URL)
    telemetry = build_telemetry_sink(TELEMETRY_URL, asynchronous=True)
    simulator = FleetSimulator(
        fleet_client=fleet_client,
        job_client=job_client,
        region=REGION,
        vehicle_count=VEHICLE_COUNT,
        routing=RoutingService(ROUTING_URL),
        telemetry=telemetry,
        speed=DEMO_SPEED,
        tick_interval_s=TICK_INTERVAL_S,
    )
    try:
        await simulator.start(stop)
        await stop.wait()
        LOG.info("Shutting down vehicle simulator")
    finally:
        await simulator.stop()
        await fleet_client.aclose()
        await job_client.aclose()
        await telemetry.aclose()


if __name__ == "__main__":
    asyncio.run(main())
