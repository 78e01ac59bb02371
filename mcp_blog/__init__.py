"""
MCP Blog - a file-backed blog managed by AI agents over MCP.

Two HTTP surfaces are served from one process:
    * the read-only website (index, post pages, RSS feed)
    * the MCP endpoint (/mcp) where agents create, edit and publish posts

CLI (after pip install):
    mcp-blog-server --web-port 3000 --mcp-port 3001
"""

from mcp_blog.version import VERSION

__version__ = VERSION
__all__ = [
    "VERSION",
    "__version__",
]
