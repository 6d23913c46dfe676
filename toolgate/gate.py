from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TextIO

from .registry import ToolDescriptor


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvocationRequest:
    name: str
    args: dict[str, str] = field(default_factory=dict)


ConfirmationChannel = Callable[[ToolDescriptor, InvocationRequest], bool]


def deny_all(descriptor: ToolDescriptor, request: InvocationRequest) -> bool:
    return False


def approve_all(descriptor: ToolDescriptor, request: InvocationRequest) -> bool:
    return True


class ApproveListed:
    def __init__(self, names: Iterable[str]) -> None:
        self.names = frozenset(names)

    def __call__(self, descriptor: ToolDescriptor, request: InvocationRequest) -> bool:
        return descriptor.name in self.names


class TerminalConfirmation:
    """Asks the operator on the terminal before a confirmed tool runs."""

    def __init__(
        self,
        prompt: Callable[[str], str] | None = None,
        out: TextIO | None = None,
    ) -> None:
        self.prompt = prompt if prompt is not None else input
        self.out = out

    def __call__(self, descriptor: ToolDescriptor, request: InvocationRequest) -> bool:
        lines = [f"Tool '{descriptor.name}' ({descriptor.category}) wants to run with:"]
        for key, value in request.args.items():
            preview = value if len(value) <= 400 else value[:400] + "..."
            lines.append(f"  {key}: {preview}")
        print("\n".join(lines), file=self.out)
        try:
            answer = self.prompt("Allow? [y/N] ")
        except EOFError:
            return False
        return answer.strip().lower() in {"y", "yes"}


class ConfirmationGate:
    def __init__(self, channel: ConfirmationChannel = deny_all) -> None:
        self.channel = channel

    def authorize(self, descriptor: ToolDescriptor, request: InvocationRequest) -> bool:
        if not descriptor.requires_confirmation:
            return True
        try:
            approved = self.channel(descriptor, request)
        except Exception as exc:  # noqa: BLE001
            logger.warning("confirmation channel failed for %s: %s", descriptor.name, exc)
            return False
        if approved is not True:
            logger.warning("denied %s", descriptor.name)
            return False
        logger.info("approved %s", descriptor.name)
        return True
