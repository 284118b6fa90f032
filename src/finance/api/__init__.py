from finance.api.routes import finance_router, payout_router

__all__ = ["finance_router", "payout_router"]
