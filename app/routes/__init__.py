from app.routes.dashboard import router as dashboard_router
from app.routes.proposals import router as proposals_router
from app.routes.payments import router as payments_router
from app.routes.partners import router as partners_router
from app.routes.service_types import router as service_types_router

__all__ = [
    'dashboard_router',
    'proposals_router',
    'payments_router',
    'partners_router',
    'service_types_router',
]
