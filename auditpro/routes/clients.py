"""Client listing, search, upsert and removal endpoints."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, Header, HTTPException, Query

from ..api_models import ClientRequest, ClientsResponse, DeleteResponse, EntityResponse
from ..capabilities import require_admin
from ..dashboard import next_visit_date, search_clients
from ..domain_models import Client
from ..workspace import EntityKind
from ._helpers import acting_user, domain_errors_as_http

if TYPE_CHECKING:
    from ..app import RuntimeState


def create_client_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    def _client_payload(client: Client) -> dict:
        payload = client.to_dict()
        next_visit = next_visit_date(client)
        payload["nextVisitDate"] = next_visit.isoformat() if next_visit else None
        status = state.workspace.sync_status(EntityKind.CLIENT, client.id)
        payload["syncStatus"] = status.value if status else None
        return payload

    @router.get("/clients", response_model=ClientsResponse)
    async def get_clients(search: str | None = Query(default=None)) -> ClientsResponse:
        clients = search_clients(state.workspace.list_clients(), search)
        return {"clients": [_client_payload(client) for client in clients]}

    @router.post("/clients", response_model=EntityResponse)
    async def save_client(req: ClientRequest) -> EntityResponse:
        client = Client.from_dict(req.model_dump())
        status = await asyncio.to_thread(state.workspace.save_client, client)
        return {"id": client.id, "syncStatus": status.value}

    @router.delete("/clients/{client_id}", response_model=DeleteResponse)
    async def delete_client(
        client_id: str,
        x_user_id: str | None = Header(default=None),
    ) -> DeleteResponse:
        with domain_errors_as_http():
            require_admin(acting_user(state, x_user_id), "delete clients")
        removed = await asyncio.to_thread(state.workspace.delete_client, client_id)
        if not removed:
            raise HTTPException(status_code=404, detail="Unknown client")
        return {"id": client_id, "status": "deleted"}

    return router
