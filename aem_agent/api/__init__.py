"""
HTTP front end for the AEM authoring agent.
"""

from .server import AgentRunServer, create_app

__all__ = ["AgentRunServer", "create_app"]
