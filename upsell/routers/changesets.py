"""Changeset signing endpoint."""
from fastapi import APIRouter, Depends, HTTPException

from upsell.auth import CheckoutSession, authenticate_checkout
from upsell.schemas import SignChangesetRequest, SignChangesetResponse
from upsell.services.changeset_service import (
    ChangesetSigningError,
    sign_changeset,
    validate_changes,
)

router = APIRouter()


@router.post("/sign-changeset", response_model=SignChangesetResponse)
def sign(
    request: SignChangesetRequest,
    checkout: CheckoutSession = Depends(authenticate_checkout)
):
    """
    Sign the changes the buyer accepted.

    The extension hands the returned token to Shopify's applyChangeset.
    """
    if checkout.reference_id and checkout.reference_id != request.reference_id:
        raise HTTPException(status_code=403, detail="Reference ID does not match session")

    try:
        changes = validate_changes(request.changes)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        token = sign_changeset(request.reference_id, changes)
    except ChangesetSigningError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return SignChangesetResponse(token=token)
