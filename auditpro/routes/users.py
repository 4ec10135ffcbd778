"""PIN selection and user management endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Header, HTTPException

from ..api_models import (
    DeleteResponse,
    EntityResponse,
    SessionRequest,
    SessionResponse,
    UserRequest,
    UsersResponse,
)
from ..capabilities import can_edit_reports, require_admin, select_user
from ..domain_models import User
from ..workspace import EntityKind
from ._helpers import acting_user, domain_errors_as_http

if TYPE_CHECKING:
    from ..app import RuntimeState

LOGGER = logging.getLogger(__name__)


def create_user_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    def _user_payload(user: User) -> dict:
        payload = user.to_dict(include_pin=False)
        status = state.workspace.sync_status(EntityKind.USER, user.id)
        payload["syncStatus"] = status.value if status else None
        return payload

    @router.post("/session", response_model=SessionResponse)
    async def open_session(req: SessionRequest) -> SessionResponse:
        user = select_user(state.workspace.list_users(), req.userId, req.pin)
        if user is None:
            raise HTTPException(status_code=401, detail="Invalid user or PIN")
        LOGGER.info("User %s selected (%s)", user.id, user.role.value)
        return {"user": _user_payload(user), "canEditReports": can_edit_reports(user)}

    @router.get("/users", response_model=UsersResponse)
    async def get_users() -> UsersResponse:
        return {"users": [_user_payload(user) for user in state.workspace.list_users()]}

    @router.post("/users", response_model=EntityResponse)
    async def save_user(
        req: UserRequest,
        x_user_id: str | None = Header(default=None),
    ) -> EntityResponse:
        with domain_errors_as_http():
            require_admin(acting_user(state, x_user_id), "manage users")
        user = User.from_dict(req.model_dump())
        status = await asyncio.to_thread(state.workspace.save_user, user)
        return {"id": user.id, "syncStatus": status.value}

    @router.delete("/users/{user_id}", response_model=DeleteResponse)
    async def delete_user(
        user_id: str,
        x_user_id: str | None = Header(default=None),
    ) -> DeleteResponse:
        with domain_errors_as_http():
            require_admin(acting_user(state, x_user_id), "manage users")
        removed = await asyncio.to_thread(state.workspace.delete_user, user_id)
        if not removed:
            raise HTTPException(status_code=404, detail="Unknown user")
        return {"id": user_id, "status": "deleted"}

    return router
