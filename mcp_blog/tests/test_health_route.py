"""Unit tests for the MCP app health endpoint."""

from starlette.testclient import TestClient

from mcp_blog.main import create_mcp_app
from mcp_blog.version import VERSION


def test_health_endpoint_response_structure(make_factory):
    """Health reports server name and version."""
    with TestClient(create_mcp_app(make_factory())) as client:
        resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "server": "mcp-blog", "version": VERSION}


def test_health_endpoint_no_auth_required(make_factory):
    """Health stays reachable when the MCP endpoint requires a token."""
    with TestClient(create_mcp_app(make_factory(mcp_api_token="s3cret"))) as client:
        resp = client.get("/health")

    assert resp.status_code == 200
