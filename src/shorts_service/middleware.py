from dataclasses import dataclass, field
from typing import Type, Callable, Any, Dict

from .protocols import Middleware
from .exceptions import ValidationError
import logging
import time


@dataclass
class MiddlewareDefinition:
    """Definition of a middleware to be applied at runtime."""

    middleware_class: Type["Middleware"]
    kwargs: Dict[str, Any] = field(default_factory=dict)


class ValidatorMiddleware(Middleware):
    """
    Middleware for validation using the Validator protocol.

    Calls `validator_class().validate(message)`; if the result has errors,
    raises `ValidationError` before the handler runs.
    """

    def __init__(self, validator_class: Type = None):
        self.validator_class = validator_class

    def apply(self, handler_func: Callable, message) -> Callable:
        async def wrapped(*args, **kwargs):
            if self.validator_class:
                validator = self.validator_class()
                result = await validator.validate(message)

                if result.has_errors():
                    raise ValidationError(type(message).__name__, result.errors)
            return await handler_func(*args, **kwargs)

        return wrapped


class LoggingMiddleware(Middleware):
    """
    Logs each dispatch to the "shorts_service" logger.

    Lines are prefixed with the correlation id, or the message id when the
    message has none. Failures are logged at ERROR and re-raised.
    """

    def __init__(self, level: str = "info"):
        self.level = level

    def apply(self, handler_func: Callable, message) -> Callable:
        logger = logging.getLogger("shorts_service")
        level = logging.getLevelName(self.level.upper())
        if not isinstance(level, int):
            level = logging.INFO

        async def wrapped(*args, **kwargs):
            message_name = type(message).__name__

            trace_id = getattr(message, "correlation_id", None)
            if not trace_id:
                trace_id = getattr(message, "command_id", None) or getattr(
                    message, "query_id", None
                )

            id_prefix = f"[{trace_id}] " if trace_id else ""

            logger.log(level, f"{id_prefix}Executing {message_name}")
            try:
                started = time.perf_counter()
                result = await handler_func(*args, **kwargs)
                elapsed = time.perf_counter() - started
                logger.log(level, f"{id_prefix}Completed {message_name} in {elapsed:.3f}s")
                return result
            except Exception as e:
                logger.error(f"{id_prefix}Failed {message_name}: {e}")
                raise

        return wrapped


class MiddlewareRegistry:
    """
    Registry for declarative middleware registration via decorators.

    Decorators store a `MiddlewareDefinition` on the handler class; the
    mediator instantiates and applies them at dispatch time. The first
    decorator listed (top-most) is the outermost layer.
    """

    def __init__(self):
        self.classes = {
            "validator": ValidatorMiddleware,
            "logging": LoggingMiddleware,
        }

    def _register(self, handler_class, middleware_class: Type["Middleware"], **kwargs):
        # Inherited definitions are copied, never extended in place
        middlewares = list(getattr(handler_class, "_middlewares", []))
        middlewares.append(
            MiddlewareDefinition(middleware_class=middleware_class, kwargs=kwargs)
        )
        handler_class._middlewares = middlewares
        return handler_class

    def validate(self, validator_class: Type = None):
        """
        Decorator to add validation middleware.

        Args:
            validator_class: A class implementing the Validator protocol.
        """

        def decorator(handler_class):
            return self._register(
                handler_class,
                self.classes["validator"],
                validator_class=validator_class,
            )

        return decorator

    def log(self, level: str = "info"):
        """Add logging middleware."""

        def decorator(handler_class):
            return self._register(handler_class, self.classes["logging"], level=level)

        return decorator

    def apply(self, middleware_class: Type[Middleware], **kwargs):
        """
        Decorator to apply a custom middleware class.

        Args:
            middleware_class: The middleware class to instantiate.
            **kwargs: Arguments to pass to the middleware constructor.
        """

        def decorator(handler_class):
            return self._register(handler_class, middleware_class, **kwargs)

        return decorator


# Global middleware registry instance
middleware = MiddlewareRegistry()
