"""MCP server for voxel-layers.

Registers all tools and runs via stdio transport.
"""

from mcp.server.fastmcp import FastMCP

from .tools.items import register_item_tools
from .tools.data import register_data_tools
from .tools.view import register_view_tools
from .tools.render import register_render_tools
from .tools.status import register_status_tools

mcp = FastMCP(
    "voxel-layers",
    instructions="Turn spatiotemporal voxel ids into extruded map polygons for rendering",
)

# Register all tool groups
register_item_tools(mcp)
register_data_tools(mcp)
register_view_tools(mcp)
register_render_tools(mcp)
register_status_tools(mcp)


def main():
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
