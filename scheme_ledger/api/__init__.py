# API Routes
from scheme_ledger.api.health import router as health_router
from scheme_ledger.api.enrollments import router as enrollments_router
from scheme_ledger.api.payments import router as payments_router
from scheme_ledger.api.rates import router as rates_router
from scheme_ledger.api.ledger import router as ledger_router

__all__ = ["health_router", "enrollments_router", "payments_router", "rates_router", "ledger_router"]
