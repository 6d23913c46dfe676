from __future__ import annotations

from .config import Settings, load_settings
from .gate import ConfirmationChannel, ConfirmationGate, deny_all
from .invocation import ToolInvoker
from .registry import (
    ArgumentSpec,
    CommandOperation,
    EvaluateOperation,
    FetchMetadataOperation,
    FetchOperation,
    SearchOperation,
    ToolDescriptor,
    ToolRegistry,
)
from .tools.codeexec import Sandbox
from .tools.packages import PackageTools
from .tools.web import HttpTransport, Retriever


def build_registry(settings: Settings, transport: HttpTransport | None = None) -> ToolRegistry:
    retriever = Retriever(settings, transport=transport)
    packages = PackageTools(settings, retriever=retriever)
    sandbox = Sandbox(settings)

    def visible(name: str) -> bool:
        return name not in settings.hidden_tools

    descriptors = [
        ToolDescriptor(
            name="web_search",
            description="Search the web and return the text of the results page.",
            operation=SearchOperation(retriever.web_search),
            argument_schema=(ArgumentSpec("query", description="Search terms."),),
            category="retrieval",
            visible=visible("web_search"),
        ),
        ToolDescriptor(
            name="fetch_url",
            description="Fetch a web page or PDF and return its plain text.",
            operation=FetchOperation(retriever.fetch_url),
            argument_schema=(ArgumentSpec("url", description="Absolute http(s) URL."),),
            category="retrieval",
            visible=visible("fetch_url"),
        ),
        ToolDescriptor(
            name="search_python_docs",
            description="Search the official Python documentation.",
            operation=SearchOperation(retriever.search_python_docs, arg="topic"),
            argument_schema=(ArgumentSpec("topic", description="Module, function or concept to look up."),),
            category="retrieval",
            visible=visible("search_python_docs"),
        ),
        ToolDescriptor(
            name="search_stackoverflow",
            description="Search Stack Overflow questions and answers.",
            operation=SearchOperation(retriever.search_stackoverflow),
            argument_schema=(ArgumentSpec("query", description="Problem or error message."),),
            category="retrieval",
            visible=visible("search_stackoverflow"),
        ),
        ToolDescriptor(
            name="fetch_package_metadata",
            description="Look up a package on PyPI: version, summary, author, homepage and license.",
            operation=FetchMetadataOperation(packages),
            argument_schema=(ArgumentSpec("package_name", description="Distribution name on PyPI."),),
            category="retrieval",
            visible=visible("fetch_package_metadata"),
        ),
        ToolDescriptor(
            name="python_version",
            description="Report the version of the local Python interpreter.",
            operation=CommandOperation(packages.python_version),
            category="environment",
            visible=visible("python_version"),
        ),
        ToolDescriptor(
            name="pip_list",
            description="List packages installed in the local environment.",
            operation=CommandOperation(packages.pip_list),
            category="environment",
            visible=visible("pip_list"),
        ),
        ToolDescriptor(
            name="pip_show",
            description="Show details of an installed package.",
            operation=CommandOperation(packages.pip_show, arg="package_name"),
            argument_schema=(ArgumentSpec("package_name", description="Installed distribution name."),),
            category="environment",
            visible=visible("pip_show"),
        ),
        ToolDescriptor(
            name="pip_install_tool",
            description="Install a package into the local environment with pip.",
            operation=CommandOperation(packages.pip_install, arg="package_name"),
            argument_schema=(
                ArgumentSpec("package_name", description="Requirement, e.g. 'requests' or 'requests==2.31.0'."),
            ),
            category="environment",
            requires_confirmation=True,
            visible=visible("pip_install_tool"),
        ),
        ToolDescriptor(
            name="evaluate_python",
            description="Run a Python program and return everything it printed.",
            operation=EvaluateOperation(sandbox),
            argument_schema=(ArgumentSpec("code", description="Complete Python source to execute."),),
            category="execution",
            requires_confirmation=True,
            visible=visible("evaluate_python"),
        ),
    ]

    registry = ToolRegistry()
    for descriptor in descriptors:
        registry.register(descriptor)
    return registry.freeze()


def build_invoker(
    settings: Settings | None = None,
    channel: ConfirmationChannel = deny_all,
    transport: HttpTransport | None = None,
) -> ToolInvoker:
    settings = settings or load_settings()
    return ToolInvoker(build_registry(settings, transport=transport), ConfirmationGate(channel))
