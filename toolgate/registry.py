from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from .errors import DuplicateToolName, InvalidArguments, InvalidDescriptor, RegistryFrozen, UnknownTool
from .tools.codeexec import Sandbox
from .tools.packages import PackageTools


logger = logging.getLogger(__name__)

CATEGORIES = {"retrieval", "execution", "environment"}


class Operation(Protocol):
    def invoke(self, args: Mapping[str, str]) -> str: ...


@dataclass(frozen=True)
class SearchOperation:
    search: Callable[[str], str]
    arg: str = "query"

    def invoke(self, args: Mapping[str, str]) -> str:
        return self.search(args[self.arg])


@dataclass(frozen=True)
class FetchOperation:
    fetch: Callable[[str], str]
    arg: str = "url"

    def invoke(self, args: Mapping[str, str]) -> str:
        return self.fetch(args[self.arg])


@dataclass(frozen=True)
class FetchMetadataOperation:
    packages: PackageTools
    arg: str = "package_name"

    def invoke(self, args: Mapping[str, str]) -> str:
        return self.packages.package_metadata(args[self.arg]).render()


@dataclass(frozen=True)
class EvaluateOperation:
    sandbox: Sandbox
    arg: str = "code"

    def invoke(self, args: Mapping[str, str]) -> str:
        return self.sandbox.evaluate(args[self.arg])


@dataclass(frozen=True)
class CommandOperation:
    """Local environment query; ``arg`` is None for commands taking no input."""

    command: Callable[..., str]
    arg: str | None = None

    def invoke(self, args: Mapping[str, str]) -> str:
        if self.arg is None:
            return self.command()
        return self.command(args[self.arg])


@dataclass(frozen=True)
class ArgumentSpec:
    name: str
    type: str = "string"
    description: str = ""
    required: bool = True

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "type": self.type, "description": self.description}


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    operation: Operation = field(repr=False, compare=False)
    argument_schema: tuple[ArgumentSpec, ...] = ()
    category: str = "retrieval"
    requires_confirmation: bool = False
    visible: bool = True

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise InvalidDescriptor("Tool name must be non-empty")
        if self.category not in CATEGORIES:
            raise InvalidDescriptor(f"Unknown category for {self.name}: {self.category}")
        names = [a.name for a in self.argument_schema]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise InvalidDescriptor(f"Duplicate argument names for {self.name}: {', '.join(duplicates)}")

    def as_protocol(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "args": [a.as_dict() for a in self.argument_schema],
            "category": self.category,
            "confirm": self.requires_confirmation,
            "include": self.visible,
        }


class ToolRegistry:
    """Catalog of tool descriptors, filled once and then frozen."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, descriptor: ToolDescriptor) -> None:
        if self._frozen:
            raise RegistryFrozen(f"Registry is frozen; cannot register {descriptor.name}")
        if descriptor.name in self._tools:
            raise DuplicateToolName(descriptor.name)
        self._tools[descriptor.name] = descriptor
        logger.debug("registered tool %s (%s)", descriptor.name, descriptor.category)

    def freeze(self) -> ToolRegistry:
        self._frozen = True
        return self

    def lookup(self, name: str) -> ToolDescriptor:
        descriptor = self._tools.get((name or "").strip())
        if descriptor is None:
            raise UnknownTool(name)
        return descriptor

    def list(self, category: str | None = None, include_hidden: bool = True) -> list[ToolDescriptor]:
        rows = []
        for descriptor in self._tools.values():
            if category is not None and descriptor.category != category:
                continue
            if not include_hidden and not descriptor.visible:
                continue
            rows.append(descriptor)
        return rows

    def definitions(self, category: str | None = None) -> list[dict[str, Any]]:
        return [d.as_protocol() for d in self.list(category=category, include_hidden=False)]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def validate_arguments(descriptor: ToolDescriptor, args: Mapping[str, Any]) -> dict[str, str]:
    known = {a.name for a in descriptor.argument_schema}
    unknown = sorted(k for k in args if k not in known)
    if unknown:
        raise InvalidArguments(f"{descriptor.name} got unexpected arguments: {', '.join(unknown)}")

    missing = [a.name for a in descriptor.argument_schema if a.required and a.name not in args]
    if missing:
        raise InvalidArguments(f"{descriptor.name} is missing required arguments: {', '.join(missing)}")

    clean: dict[str, str] = {}
    for key, value in args.items():
        if not isinstance(value, str):
            raise InvalidArguments(
                f"{descriptor.name} argument '{key}' must be a string, got {type(value).__name__}"
            )
        clean[key] = value
    return clean
