"""Resource source behind the embedded provider."""

from mcpbridge.mcp.errors import ResourceNotFoundError
from mcpbridge.mcp.models import (
    McpResource,
    McpResourceContents,
    McpResourceResponse,
    McpResourceTemplate,
)

SAMPLE_RESOURCES = [
    McpResource(
        uri="file:///sample-data.txt",
        name="Sample Text File",
        description="A sample text file for testing resource views",
        mimeType="text/plain",
    ),
    McpResource(
        uri="file:///config.json",
        name="Configuration File",
        description="Sample JSON configuration for demonstration purposes",
        mimeType="application/json",
    ),
    McpResource(
        uri="data://test/example",
        name="Test Data Resource",
        description="Example data resource with custom URI scheme",
        mimeType="text/plain",
    ),
]


class ResourceLibrary:
    """A fixed list of resources whose content is synthesized from the URI."""

    def __init__(
        self,
        resources: list[McpResource] | None = None,
        templates: list[McpResourceTemplate] | None = None,
    ):
        self._resources = list(resources or [])
        self._templates = list(templates or [])

    def list_templates(self) -> list[McpResourceTemplate]:
        return list(self._templates)

    def list(self) -> list[McpResource]:
        return list(self._resources)

    def read(self, uri: str) -> McpResourceResponse:
        resource = next((r for r in self._resources if r.uri == uri), None)
        if resource is None:
            raise ResourceNotFoundError(f"Resource with URI '{uri}' not found")

        if uri.startswith("file://"):
            filename = uri.rsplit("/", 1)[-1]
            text = (
                f"Sample content for {filename}\n\n"
                "This is a test resource provided by the embedded MCP server."
            )
        elif uri.startswith("data://"):
            text = f"Sample data resource: {resource.description or resource.name}"
        else:
            text = f"Content for {resource.name}"

        return McpResourceResponse(
            contents=[McpResourceContents(uri=uri, mimeType=resource.mimeType, text=text)]
        )

    def __bool__(self) -> bool:
        return bool(self._resources)
