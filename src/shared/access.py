"""Caller identity and permission checks for SouqHub APIs.

Authentication happens upstream (gateway / auth service). By the time a
request reaches a router the caller is described by three headers:

    X-Actor-Id           the account id
    X-Actor-Type         customer | vendor | admin | super_admin
    X-Actor-Permissions  comma-separated permission codes

Routes take an `Actor` via `Depends(current_actor)` and pass the relevant
bits into commands. Domain handlers raise `AccessDenied`, which
`register_access_handlers` turns into a 403.
"""

import os
from dataclasses import dataclass, field
from enum import Enum

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse


class ActorType(Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class Permission(Enum):
    VENDOR_APPROVE = "vendor.approve"
    VENDOR_CONTROLLED_APPROVE = "vendor.controlled.approve"
    ORDER_VIEW = "order.view"
    ORDER_MANAGE = "order.manage"
    ORDER_CONTROLLED_APPROVE = "order.controlled.approve"
    PRODUCT_MANAGE = "product.manage"
    PRODUCT_CONTROLLED_APPROVE = "product.controlled.approve"
    PAYOUT_MANAGE = "payout.manage"
    SETTINGS_MANAGE = "settings.manage"


PERMISSION_CODES = frozenset(p.value for p in Permission)


class AccessDenied(Exception):
    """The caller is authenticated but not allowed to do this."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class Actor:
    id: str
    type: str = ActorType.CUSTOMER.value
    permissions: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return self.type in (ActorType.ADMIN.value, ActorType.SUPER_ADMIN.value)

    @property
    def is_vendor(self) -> bool:
        return self.type == ActorType.VENDOR.value

    def has_permission(self, code: str) -> bool:
        if self.type == ActorType.SUPER_ADMIN.value:
            return True
        if not self.is_admin:
            return False
        return code in self.permissions

    def has_any_permission(self, *codes: str) -> bool:
        return any(self.has_permission(code) for code in codes)


def parse_permissions(raw: str | None) -> frozenset[str]:
    if not raw:
        return frozenset()
    return frozenset(code.strip() for code in raw.split(",") if code.strip())


def serialize_permissions(permissions) -> str:
    return ",".join(sorted(permissions or []))


def actor_from(actor_id: str, actor_type: str, permissions: str | None = None) -> Actor:
    """Rebuild an Actor from the plain values carried on a command."""
    return Actor(id=str(actor_id), type=actor_type, permissions=parse_permissions(permissions))


async def current_actor(
    x_actor_id: str = Header(default=""),
    x_actor_type: str = Header(default=ActorType.CUSTOMER.value),
    x_actor_permissions: str = Header(default=""),
) -> Actor:
    """FastAPI dependency resolving the caller from gateway headers."""
    if not x_actor_id:
        raise AccessDenied("Missing caller identity")
    if x_actor_type not in {t.value for t in ActorType}:
        raise AccessDenied(f"Unknown actor type: {x_actor_type}")
    return Actor(
        id=x_actor_id,
        type=x_actor_type,
        permissions=parse_permissions(x_actor_permissions),
    )


async def verify_cron_secret(x_cron_secret: str = Header(default="")) -> None:
    """Guard for scheduler-triggered maintenance endpoints.

    In production the caller must present `X-Cron-Secret` matching the
    `CRON_SECRET` environment variable.
    """
    if os.environ.get("PROTEAN_ENV") != "production":
        return
    secret = os.environ.get("CRON_SECRET")
    if not secret or x_cron_secret != secret:
        raise HTTPException(status_code=401, detail="Unauthorized")


async def optional_actor(
    x_actor_id: str = Header(default=""),
    x_actor_type: str = Header(default=ActorType.CUSTOMER.value),
    x_actor_permissions: str = Header(default=""),
) -> Actor | None:
    """Like `current_actor`, but anonymous callers resolve to None."""
    if not x_actor_id:
        return None
    return await current_actor(x_actor_id, x_actor_type, x_actor_permissions)


def require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise AccessDenied("Admin access required")


def require_vendor(actor: Actor) -> None:
    if not actor.is_vendor:
        raise AccessDenied("Vendor access required")


def require_permission(actor: Actor, *codes: str) -> None:
    """Pass when the actor holds at least one of the given permission codes."""
    if not actor.has_any_permission(*codes):
        raise AccessDenied(f"Forbidden: Missing {' or '.join(codes)} permission")


async def _access_denied_handler(_request: Request, exc: AccessDenied) -> JSONResponse:
    return JSONResponse(status_code=403, content={"error": exc.message})


def register_access_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AccessDenied, _access_denied_handler)
