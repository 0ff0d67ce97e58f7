"""Required-action routes: trigger evaluation, challenge and processing."""
from pathlib import Path
from typing import Any, Mapping

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from ..deps import current_user, identity_store, terms_provider
from ..domain.models import RequiredActionStatus, UserAccount
from ..domain.schemas import EvaluationOut, ProcessOut
from ..services.identity import IdentityStore
from ..services.processor import FormSubmission
from ..services.required_action import ExternalTermsProvider, RequiredActionContext

router = APIRouter()

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

# Shown to users instead of any policy detail.
FAILURE_DETAIL = "Unable to complete the required action"


class JinjaChallengeRenderer:
    """Renders challenge forms for one request."""

    def __init__(self, request: Request) -> None:
        self.request = request

    def render(self, template: str, attributes: Mapping[str, Any]) -> HTMLResponse:
        return templates.TemplateResponse(self.request, template, dict(attributes))


async def form_submission(request: Request) -> FormSubmission:
    form = await request.form()
    # File parts keep their field name so presence checks still see them.
    return FormSubmission.from_items(
        (name, value if isinstance(value, str) else "") for name, value in form.multi_items()
    )


@router.post("/{user_id}/evaluate", response_model=EvaluationOut)
def evaluate(
    user: UserAccount = Depends(current_user),
    identity: IdentityStore = Depends(identity_store),
    provider: ExternalTermsProvider = Depends(terms_provider),
):
    context = RequiredActionContext(user=user, identity=identity)
    result = provider.evaluate_triggers(context)
    if context.failed:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=FAILURE_DETAIL)
    return EvaluationOut(
        user_id=user.id,
        status=result,
        action_required=result is RequiredActionStatus.TRIGGERED,
    )


@router.get("/{user_id}/challenge", response_class=HTMLResponse)
def challenge(
    request: Request,
    user: UserAccount = Depends(current_user),
    identity: IdentityStore = Depends(identity_store),
    provider: ExternalTermsProvider = Depends(terms_provider),
):
    """Evaluate and, when the user is behind, render the accept / cancel form."""
    context = RequiredActionContext(
        user=user,
        identity=identity,
        renderer=JinjaChallengeRenderer(request),
    )
    response = provider.required_action_challenge(context)
    if context.failed:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=FAILURE_DETAIL)
    if response is None:
        # Already up to date; a stale flag from an earlier evaluation is dropped.
        identity.remove_required_action(user.id, provider.provider_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return response


@router.post("/{user_id}/process", response_model=ProcessOut)
def process(
    submission: FormSubmission = Depends(form_submission),
    user: UserAccount = Depends(current_user),
    identity: IdentityStore = Depends(identity_store),
    provider: ExternalTermsProvider = Depends(terms_provider),
):
    context = RequiredActionContext(user=user, identity=identity, form=submission)
    outcome = provider.process_action(context)
    return ProcessOut(
        user_id=user.id,
        status=context.status,
        outcome=outcome,
        required_actions=identity.required_actions(user.id),
    )
