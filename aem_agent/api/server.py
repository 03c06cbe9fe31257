"""
Agent HTTP Front End

Exposes the agent loop over HTTP:
- POST /agent/runs   run one goal and return the final state
- GET  /health       basic health check
- GET  /ready        readiness check
"""

import asyncio
import sys
from typing import Any, Awaitable, Callable, Optional
from datetime import datetime
from contextlib import asynccontextmanager

import structlog
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from ..config_loader import RuntimeSettings, load_config
from ..errors import AgentError, ConfigError
from ..logging_config import configure_logging
from ..main import build_client, build_workflow
from ..schemas.state import serialize_state
from ..workflow import AEMAgentWorkflow

logger = structlog.get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    agent_name: str
    version: str
    timestamp: str


class RunRequest(BaseModel):
    """A goal to run"""
    goal: str = Field(min_length=1)
    timeout_seconds: Optional[float] = Field(default=None, gt=0)


class RunResponse(BaseModel):
    """Final state of a run"""
    outcome: str
    state: dict[str, Any]
    started_at: datetime
    completed_at: datetime
    duration_ms: int


class AgentRunServer:
    """HTTP server wrapping an AEMAgentWorkflow"""

    def __init__(
        self,
        workflow: AEMAgentWorkflow,
        agent_name: str,
        agent_version: str,
        agent_description: str = "",
        on_shutdown: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        """
        Initialize server.

        Args:
            workflow: Compiled or uncompiled agent workflow
            agent_name: Name of this agent
            agent_version: Version string
            agent_description: Human-readable description
            on_shutdown: Coroutine run at shutdown (e.g. closing the gateway client)
        """
        self.workflow = workflow
        self.agent_name = agent_name
        self.agent_version = agent_version
        self.agent_description = agent_description
        self.on_shutdown = on_shutdown

        self._ready = False
        self.app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with routes"""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            """Lifecycle management"""
            logger.info("Agent server starting", agent=self.agent_name, version=self.agent_version)
            self.workflow.compile()
            self._ready = True
            yield
            logger.info("Agent server shutting down")
            self._ready = False
            if self.on_shutdown is not None:
                await self.on_shutdown()

        app = FastAPI(
            title=f"{self.agent_name} Agent Server",
            version=self.agent_version,
            description=self.agent_description,
            lifespan=lifespan,
        )

        self._register_routes(app)
        return app

    def _register_routes(self, app: FastAPI) -> None:
        """Register all API routes"""

        # ============== Health Endpoints ==============

        @app.get("/health", response_model=HealthResponse)
        async def health_check():
            """Basic health check"""
            return HealthResponse(
                status="healthy",
                agent_name=self.agent_name,
                version=self.agent_version,
                timestamp=datetime.utcnow().isoformat(),
            )

        @app.get("/ready")
        async def readiness_check():
            """Readiness check for orchestration"""
            if not self._ready:
                raise HTTPException(status_code=503, detail="Not ready")
            return {"status": "ready"}

        # ============== Agent Runs ==============

        @app.post("/agent/runs", response_model=RunResponse)
        async def run_goal(request: RunRequest):
            """
            Run one goal synchronously.

            Guard and execution failures are part of the returned state;
            only planner failures produce an error status.
            """
            logger.info("Received agent run", goal=request.goal)

            started_at = datetime.utcnow()
            try:
                if request.timeout_seconds is not None:
                    state = await asyncio.wait_for(
                        self.workflow.run(request.goal),
                        timeout=request.timeout_seconds,
                    )
                else:
                    state = await self.workflow.run(request.goal)

            except asyncio.TimeoutError:
                logger.error("Agent run timed out", goal=request.goal)
                raise HTTPException(status_code=504, detail="Agent run timed out")

            except AgentError as e:
                logger.error("Agent run failed", goal=request.goal, error=str(e))
                raise HTTPException(status_code=502, detail=str(e))

            except Exception as e:
                logger.exception("Agent run crashed", goal=request.goal)
                raise HTTPException(status_code=500, detail=str(e))

            completed_at = datetime.utcnow()
            payload = serialize_state(state)
            return RunResponse(
                outcome=payload["outcome"],
                state=payload,
                started_at=started_at,
                completed_at=completed_at,
                duration_ms=int((completed_at - started_at).total_seconds() * 1000),
            )


def create_app(
    workflow: AEMAgentWorkflow,
    agent_name: str,
    agent_version: str,
    **kwargs,
) -> FastAPI:
    """Convenience function for creating the server app"""
    server = AgentRunServer(
        workflow=workflow,
        agent_name=agent_name,
        agent_version=agent_version,
        **kwargs,
    )
    return server.app


def main() -> None:
    """Run the agent server with uvicorn"""
    load_dotenv()
    settings = RuntimeSettings()
    configure_logging(settings.log_level or "INFO", settings.log_format or "json")

    try:
        config = load_config(settings.config_path)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(
        settings.log_level or config.observability.log_level,
        settings.log_format or config.observability.log_format,
    )

    client = build_client(config)
    server = AgentRunServer(
        workflow=build_workflow(config, client),
        agent_name=config.agent.name,
        agent_version=config.agent.version,
        agent_description=config.agent.description,
        on_shutdown=client.aclose,
    )

    logger.info("Starting agent server", host=config.server.host, port=config.server.port)
    uvicorn.run(
        server.app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.observability.log_level.lower(),
    )


if __name__ == "__main__":
    main()
