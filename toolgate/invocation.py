from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .errors import Denied, ToolError
from .gate import ConfirmationGate, InvocationRequest
from .registry import ToolRegistry, validate_arguments


logger = logging.getLogger(__name__)


@dataclass
class InvocationResult:
    tool: str
    ok: bool
    content: str
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {"tool": self.tool, "ok": self.ok, "content": self.content, "error": self.error}


class ToolInvoker:
    """Validates, authorizes and dispatches tool calls.

    ``invoke`` never raises: every failure comes back as a result whose
    content names the tool and the cause, ready to hand to the model.
    """

    def __init__(self, registry: ToolRegistry, gate: ConfirmationGate | None = None) -> None:
        self.registry = registry
        self.gate = gate or ConfirmationGate()

    def invoke(self, request: InvocationRequest) -> InvocationResult:
        try:
            descriptor = self.registry.lookup(request.name)
            args = validate_arguments(descriptor, request.args)
            checked = InvocationRequest(name=descriptor.name, args=args)
            if not self.gate.authorize(descriptor, checked):
                raise Denied(descriptor.name)
            logger.info("invoking %s", descriptor.name)
            content = descriptor.operation.invoke(args)
        except ToolError as exc:
            logger.warning("%s failed: %s", request.name, exc)
            return InvocationResult(
                tool=request.name,
                ok=False,
                content=f"Error ({exc.kind}) in {request.name}: {exc}",
                error=exc.kind,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("unexpected failure in %s", request.name)
            return InvocationResult(
                tool=request.name,
                ok=False,
                content=f"Error in {request.name}: {exc}",
                error=type(exc).__name__,
            )
        return InvocationResult(tool=descriptor.name, ok=True, content=content)

    def call(self, name: str, **args: Any) -> InvocationResult:
        return self.invoke(InvocationRequest(name=name, args=dict(args)))
