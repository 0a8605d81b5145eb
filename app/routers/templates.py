"""
Status templates router.

GET    /templates/{user_id}              - list templates (optional ?category=)
PUT    /templates/{user_id}/{name}       - create or replace
DELETE /templates/{user_id}/{name}       - delete (no-op when missing)
POST   /templates/{user_id}/{name}/use   - submit the template as a status update
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.routers.status import to_update_response
from app.schemas.common import ErrorResponse
from app.schemas.status import StatusUpdateResponse
from app.schemas.template import TemplateOut, TemplateSave
from app.services.llm import CompletionClient, get_completion_client
from app.services.status import run_status_update
from app.services.templates import TemplateStore

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("/{user_id}", response_model=list[TemplateOut], summary="List templates")
def list_templates(
    user_id: str,
    category: Optional[str] = Query(None, description="Case-insensitive; \"uncategorized\" lists templates without one"),
    db: Session = Depends(get_db),
) -> list[TemplateOut]:
    return TemplateStore(db).for_user(user_id, category=category)


@router.put("/{user_id}/{name}", response_model=TemplateOut, summary="Save template")
def save_template(
    user_id: str,
    name: str,
    body: TemplateSave,
    db: Session = Depends(get_db),
) -> TemplateOut:
    return TemplateStore(db).save(
        user_id,
        name,
        body.template_text,
        emoji=body.emoji,
        category=body.category,
    )


@router.delete(
    "/{user_id}/{name}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete template",
)
def delete_template(user_id: str, name: str, db: Session = Depends(get_db)) -> Response:
    TemplateStore(db).delete(user_id, name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{user_id}/{name}/use",
    response_model=StatusUpdateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a status from a template",
    responses={404: {"model": ErrorResponse, "description": "Template not found"}},
)
async def use_template(
    user_id: str,
    name: str,
    db: Session = Depends(get_db),
    completion: CompletionClient = Depends(get_completion_client),
) -> StatusUpdateResponse:
    template = TemplateStore(db).get(user_id, name)
    result = await run_status_update(db, completion, user_id, template.template_text)
    return to_update_response(result)
