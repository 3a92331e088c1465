"""
Package API Routes

REST API endpoints for browsing, purchasing and cancelling ad packages.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.dependencies import (
    PackageServiceDep,
    PurchaseOrchestratorDep,
    get_current_user_id,
    get_optional_user_id,
)
from app.domain.purchase import PurchaseError, PurchaseResult
from app.domain.subscription import (
    CancelResponse,
    CurrentPackageResponse,
    CurrentPackageSummary,
    PlanListResponse,
    PurchaseRequest,
    PurchaseResponse,
    SubscriptionSummary,
)


logger = logging.getLogger(__name__)

router = APIRouter()


STATUS_BY_ERROR = {
    PurchaseError.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    PurchaseError.PLAN_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    PurchaseError.PACKAGE_ALREADY_ACTIVE: status.HTTP_409_CONFLICT,
    PurchaseError.PAYMENT_FAILED: status.HTTP_402_PAYMENT_REQUIRED,
}


def _to_response(result: PurchaseResult) -> PurchaseResponse:
    return PurchaseResponse(
        success=result.success,
        message=result.message,
        subscription=result.subscription,
        payment=result.payment,
        redirect_url=result.redirect_url,
        error=result.error.value if result.error else None,
        reason=result.reason,
        current_package=(
            CurrentPackageSummary(**result.current_package)
            if result.current_package else None
        ),
    )


# =============================================================================
# Catalog Endpoints
# =============================================================================

@router.get("/packages", response_model=PlanListResponse)
async def list_packages(
    service: PackageServiceDep,
    user_id: Optional[str] = Depends(get_optional_user_id),
):
    """
    List active packages, cheapest first.

    Public. When called with a valid token the user's current plan type is
    included so the client can highlight it.
    """
    plans = await service.list_plans()

    current_plan_type = None
    if user_id:
        current = await service.current_package(user_id)
        if current:
            current_plan_type = current.plan.type.value

    return PlanListResponse(plans=plans, current_plan_type=current_plan_type)


@router.get("/packages/upgrades", response_model=PlanListResponse)
async def list_upgrades(
    service: PackageServiceDep,
    user_id: str = Depends(get_current_user_id),
):
    """List packages above the user's current tier."""
    plans, current = await service.available_upgrades(user_id)
    return PlanListResponse(
        plans=plans,
        current_plan_type=current.type.value if current else None,
    )


@router.get("/packages/current", response_model=CurrentPackageResponse)
async def get_current_package(
    service: PackageServiceDep,
    user_id: str = Depends(get_current_user_id),
):
    """Get the user's active package with its remaining days."""
    current = await service.current_package(user_id)
    if current is None:
        return CurrentPackageResponse(
            has_active_package=False,
            message="No active package found",
        )

    subscription = current.subscription
    return CurrentPackageResponse(
        has_active_package=not current.is_expired,
        package=current.plan,
        subscription=SubscriptionSummary(
            id=subscription.id,
            status=subscription.status,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
            days_remaining=current.days_remaining,
            is_expired=current.is_expired,
            payment_method=subscription.payment_method,
            amount=subscription.amount,
        ),
    )


# =============================================================================
# Purchase Endpoints
# =============================================================================

@router.post(
    "/packages/purchase",
    response_model=PurchaseResponse,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Invalid request"},
        402: {"description": "Payment failed"},
        404: {"description": "Plan not found"},
        409: {"description": "Package already active"},
    },
)
async def purchase_package(
    request: PurchaseRequest,
    orchestrator: PurchaseOrchestratorDep,
    user_id: str = Depends(get_current_user_id),
):
    """
    Purchase a package.

    Args:
        request: packageId (UUID, slug, or plan type/name), paymentMethod and
            provider-specific paymentData

    Returns:
        PurchaseResponse; redirectUrl is set for hosted-checkout gateways
    """
    result = await orchestrator.purchase(
        user_id,
        request.package_id,
        request.payment_method,
        request.payment_data,
    )
    response = _to_response(result)

    if result.success:
        logger.info(f"User {user_id} purchased {request.package_id} via {request.payment_method}")
        return response

    return JSONResponse(
        status_code=STATUS_BY_ERROR[result.error],
        content=response.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.post("/packages/cancel", response_model=CancelResponse)
async def cancel_package(
    orchestrator: PurchaseOrchestratorDep,
    user_id: str = Depends(get_current_user_id),
):
    """
    Cancel the user's active package.

    Responds 404 when there is nothing to cancel.
    """
    subscription = await orchestrator.cancel(user_id)
    return CancelResponse(
        message="Package cancelled successfully",
        subscription=subscription,
        cancelled_at=subscription.updated_at,
    )
