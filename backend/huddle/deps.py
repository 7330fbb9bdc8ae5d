from fastapi import Request

from huddle.services.store import WorkspaceStore


def get_store(request: Request) -> WorkspaceStore:
    """The single workspace store owned by the running app."""
    return request.app.state.store
