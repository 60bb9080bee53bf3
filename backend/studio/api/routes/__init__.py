from fastapi import APIRouter

from studio.api.routes import health, projects, returns, stages, tasks

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(returns.router, prefix="/returns", tags=["returns"])
api_router.include_router(stages.router, prefix="/stages", tags=["stages"])
