import pytest

from toolgate.errors import DuplicateToolName, InvalidArguments, InvalidDescriptor, RegistryFrozen, UnknownTool
from toolgate.registry import (
    ArgumentSpec,
    CommandOperation,
    SearchOperation,
    ToolDescriptor,
    ToolRegistry,
    validate_arguments,
)


def _echo(value: str) -> str:
    return f"echo:{value}"


def _descriptor(name: str, category: str = "retrieval", **kwargs: object) -> ToolDescriptor:
    return ToolDescriptor(
        name=name,
        description=f"{name} tool",
        operation=SearchOperation(_echo),
        argument_schema=(ArgumentSpec("query", description="what to look for"),),
        category=category,
        **kwargs,  # type: ignore[arg-type]
    )


def test_duplicate_name_is_rejected() -> None:
    registry = ToolRegistry()
    registry.register(_descriptor("web_search"))
    with pytest.raises(DuplicateToolName) as info:
        registry.register(_descriptor("web_search", category="execution"))
    assert info.value.name == "web_search"
    assert len(registry) == 1


def test_lookup_unknown_name_fails() -> None:
    registry = ToolRegistry()
    registry.register(_descriptor("web_search"))
    assert registry.lookup("web_search").name == "web_search"
    with pytest.raises(UnknownTool):
        registry.lookup("rm_rf")


def test_list_filters_by_category_in_registration_order() -> None:
    registry = ToolRegistry()
    for name, category in [("b", "retrieval"), ("a", "execution"), ("c", "retrieval"), ("d", "environment")]:
        registry.register(_descriptor(name, category=category))

    assert [d.name for d in registry.list()] == ["b", "a", "c", "d"]
    assert [d.name for d in registry.list(category="retrieval")] == ["b", "c"]
    assert registry.list(category="missing") == []


def test_frozen_registry_rejects_registration() -> None:
    registry = ToolRegistry()
    registry.register(_descriptor("first"))
    assert registry.freeze() is registry
    assert registry.frozen is True
    with pytest.raises(RegistryFrozen):
        registry.register(_descriptor("second"))
    assert "first" in registry
    assert "second" not in registry


def test_descriptor_rejects_duplicate_argument_names() -> None:
    with pytest.raises(InvalidDescriptor):
        ToolDescriptor(
            name="bad",
            description="bad",
            operation=SearchOperation(_echo),
            argument_schema=(ArgumentSpec("query"), ArgumentSpec("query")),
        )


def test_descriptor_rejects_unknown_category_and_blank_name() -> None:
    with pytest.raises(InvalidDescriptor):
        _descriptor("x", category="magic")
    with pytest.raises(InvalidDescriptor):
        _descriptor("  ")


def test_descriptor_is_immutable() -> None:
    descriptor = _descriptor("web_search")
    with pytest.raises(AttributeError):
        descriptor.name = "other"  # type: ignore[misc]


def test_protocol_shape_and_hidden_tools() -> None:
    registry = ToolRegistry()
    registry.register(_descriptor("shown", requires_confirmation=True))
    registry.register(_descriptor("hidden", visible=False))

    definitions = registry.definitions()
    assert definitions == [
        {
            "name": "shown",
            "description": "shown tool",
            "args": [{"name": "query", "type": "string", "description": "what to look for"}],
            "category": "retrieval",
            "confirm": True,
            "include": True,
        }
    ]
    assert [d.name for d in registry.list(include_hidden=False)] == ["shown"]
    assert registry.lookup("hidden").as_protocol()["include"] is False


def test_validate_arguments() -> None:
    descriptor = ToolDescriptor(
        name="pip_show",
        description="show",
        operation=CommandOperation(_echo, arg="package_name"),
        argument_schema=(
            ArgumentSpec("package_name"),
            ArgumentSpec("verbose", required=False),
        ),
        category="environment",
    )

    assert validate_arguments(descriptor, {"package_name": "requests"}) == {"package_name": "requests"}
    with pytest.raises(InvalidArguments, match="missing required"):
        validate_arguments(descriptor, {})
    with pytest.raises(InvalidArguments, match="unexpected"):
        validate_arguments(descriptor, {"package_name": "x", "index_url": "http://evil"})
    with pytest.raises(InvalidArguments, match="must be a string"):
        validate_arguments(descriptor, {"package_name": 3})


def test_operations_dispatch_on_named_argument() -> None:
    assert SearchOperation(_echo, arg="topic").invoke({"topic": "open"}) == "echo:open"
    assert CommandOperation(lambda: "Python 3.12.1").invoke({}) == "Python 3.12.1"
    assert CommandOperation(_echo, arg="package_name").invoke({"package_name": "flask"}) == "echo:flask"
