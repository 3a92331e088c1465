"""
Database Infrastructure Package for Ad Packages API

Exports database utilities, models, and repositories.
"""

from app.infrastructure.db.database import (
    DatabaseManager,
    get_db_manager,
    get_session,
    get_session_context,
    init_db,
    close_db,
)

from app.infrastructure.db.dependencies import (
    SessionDep,
    get_plan_repository,
    get_subscription_repository,
    get_payment_repository,
    get_purchase_orchestrator,
    get_package_service,
    PlanRepoDep,
    SubscriptionRepoDep,
    PaymentRepoDep,
    PurchaseOrchestratorDep,
    PackageServiceDep,
)


__all__ = [
    # Database management
    "DatabaseManager",
    "get_db_manager",
    "get_session",
    "get_session_context",
    "init_db",
    "close_db",
    # Dependencies
    "SessionDep",
    "get_plan_repository",
    "get_subscription_repository",
    "get_payment_repository",
    "get_purchase_orchestrator",
    "get_package_service",
    "PlanRepoDep",
    "SubscriptionRepoDep",
    "PaymentRepoDep",
    "PurchaseOrchestratorDep",
    "PackageServiceDep",
]
