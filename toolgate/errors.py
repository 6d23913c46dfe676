from __future__ import annotations


class ToolError(Exception):
    """Base class for every failure raised below the tool-call boundary."""

    kind = "ToolError"


class RetrievalError(ToolError):
    kind = "RetrievalError"


class NetworkError(RetrievalError):
    kind = "NetworkError"


class ParseError(RetrievalError):
    kind = "ParseError"


class ProcessError(ToolError):
    kind = "ProcessError"


class ProcessTimeout(ProcessError):
    kind = "ProcessTimeout"

    def __init__(self, command: list[str], timeout: float) -> None:
        self.command = list(command)
        self.timeout = timeout
        super().__init__(f"Process timed out after {timeout:g}s: {' '.join(self.command)}")


class RegistryError(ToolError):
    kind = "RegistryError"


class UnknownTool(RegistryError):
    kind = "UnknownTool"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class DuplicateToolName(RegistryError):
    kind = "DuplicateToolName"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool already registered: {name}")


class RegistryFrozen(RegistryError):
    kind = "RegistryFrozen"


class InvalidDescriptor(RegistryError):
    kind = "InvalidDescriptor"


class InvalidArguments(ToolError):
    kind = "InvalidArguments"


class Denied(ToolError):
    kind = "Denied"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool call denied: {name} requires confirmation and was not approved")
