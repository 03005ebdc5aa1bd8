"""FastAPI dependencies: services built at startup and kept on app.state."""
from fastapi import Request

from services.demo import DemoJobGenerator
from services.fleet_service import FleetService
from services.job_service import JobService


def get_fleet_service(request: Request) -> FleetService:
    return request.app.state.fleet_service


def get_job_service(request: Request) -> JobService:
    return request.app.state.job_service


def get_demo_generator(request: Request) -> DemoJobGenerator:
    return request.app.state.demo_generator
