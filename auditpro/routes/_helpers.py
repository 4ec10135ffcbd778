"""Shared route helpers used across multiple route modules."""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from fastapi import HTTPException
from fastapi.responses import Response

from ..capabilities import AccessDeniedError
from ..orchestrator import EntityNotFoundError, ExportArtifact, ReadOnlySessionError
from ..report import RenderingUnavailableError, ReportRenderError
from ..report_assembler import FinalizeValidationError

if TYPE_CHECKING:
    from ..app import RuntimeState
    from ..domain_models import User

_SAFE_FILENAME_RE = re.compile(r"[^a-zA-Z0-9._-]")


def safe_filename(name: str) -> str:
    """Sanitize *name* for use in Content-Disposition headers."""
    return _SAFE_FILENAME_RE.sub("_", name)[:200] or "download"


def acting_user(state: RuntimeState, user_id: str | None) -> User | None:
    if not user_id:
        return None
    return state.workspace.get_user(user_id)


def require_acting_user(state: RuntimeState, user_id: str | None) -> User:
    """Resolve the ``X-User-Id`` header or raise HTTP 401."""
    user = acting_user(state, user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Select a user first")
    return user


@contextmanager
def domain_errors_as_http() -> Iterator[None]:
    """Translate workflow and rendering errors into HTTP errors."""
    try:
        yield
    except FinalizeValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.message) from exc
    except ReadOnlySessionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except AccessDeniedError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except RenderingUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except ReportRenderError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def pdf_response(artifact: ExportArtifact) -> Response:
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{safe_filename(artifact.filename)}"'
        },
    )
