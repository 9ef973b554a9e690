from digitalis.bootstrap.exception_handlers import register_exception_handlers
from digitalis.bootstrap.mediator import build_mediator
from digitalis.bootstrap.middleware import register_core_middleware
from digitalis.bootstrap.routes import register_domain_routes
from digitalis.bootstrap.system_routes import register_system_routes
from digitalis.bootstrap.validation import validate_startup_config

__all__ = [
    "build_mediator",
    "register_core_middleware",
    "register_domain_routes",
    "register_system_routes",
    "register_exception_handlers",
    "validate_startup_config",
]
