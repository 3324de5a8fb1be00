"""FastAPI integration for tenantguard.

The host application authenticates requests and stores a ``Principal`` on
``request.state.principal``; these helpers turn engine decisions into
401/403 responses.
"""

from functools import wraps
from typing import Callable, Optional, Union

from fastapi import FastAPI, HTTPException, Request, status

from tenantguard.core.rbac.engine import AuthorizationEngine
from tenantguard.core.rbac.permissions import Action
from tenantguard.core.rbac.principal import Principal
from tenantguard.core.rbac.reasons import DenialReason

ENGINE_STATE_KEY = "authz_engine"


def install_engine(app: FastAPI, engine: AuthorizationEngine) -> None:
    """Attach a built engine to the application."""
    setattr(app.state, ENGINE_STATE_KEY, engine)


def get_engine(request: Request) -> AuthorizationEngine:
    """FastAPI dependency returning the application's engine."""
    engine = getattr(request.app.state, ENGINE_STATE_KEY, None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authorization is not configured"
        )
    return engine


def _enforce(
    engine: AuthorizationEngine,
    principal: Optional[Principal],
    module: str,
    action: Action,
) -> None:
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=DenialReason.SIGN_IN_REQUIRED.value
        )

    if not engine.has_permission(principal, module, action):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=engine.denied_reason(principal).value
        )


def require_module_permission(module: str, action: Union[str, Action] = Action.VIEW):
    """
    Decorator factory for FastAPI endpoints requiring a module capability.

    The endpoint must receive ``request: Request`` and ``current_principal``
    as keyword arguments (both injected by FastAPI).

    Usage:
        @router.get("/customers")
        @require_module_permission("customers", Action.VIEW)
        async def list_customers(
            request: Request,
            current_principal: Principal = Depends(get_current_principal),
        ):
            ...
    """
    action = Action(action)

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            request = kwargs.get("request")
            if request is None:
                for arg in args:
                    if isinstance(arg, Request):
                        request = arg
                        break
            if request is None:
                raise RuntimeError(
                    f"{func.__name__} must accept 'request: Request' to use "
                    f"require_module_permission"
                )

            _enforce(get_engine(request), kwargs.get("current_principal"), module, action)
            return await func(*args, **kwargs)

        return wrapper
    return decorator


class ModulePermissionDependency:
    """
    FastAPI dependency for module capability checks.

    Reads the principal from ``request.state.principal``.

    Usage:
        @router.delete(
            "/sales/{id}",
            dependencies=[Depends(ModulePermissionDependency("sales", Action.DELETE))],
        )
        async def delete_sale(id: str):
            ...
    """

    def __init__(self, module: str, action: Union[str, Action] = Action.VIEW):
        self.module = module
        self.action = Action(action)

    async def __call__(self, request: Request) -> Principal:
        principal = getattr(request.state, "principal", None)
        _enforce(get_engine(request), principal, self.module, self.action)
        return principal
