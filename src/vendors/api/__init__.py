from vendors.api.routes import router

__all__ = ["router"]
