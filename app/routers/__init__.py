"""Aggregate FastAPI routers for inclusion in the application."""
from . import public, agent, health

all_routers = [
    public.router,
    agent.router,
    health.router,
]
