"""
MCP Blog Server CLI - start the website and the MCP endpoint.

Usage:
    mcp-blog-server                              # Both apps with defaults
    mcp-blog-server --web-port 8080              # Custom website port
    mcp-blog-server --only mcp                   # MCP endpoint only
    mcp-blog-server --env /path/to/.env          # Custom env file
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def _apply_env_file(env_path: Path) -> None:
    """Load environment variables from a .env file."""
    from dotenv import load_dotenv

    if not env_path.exists():
        print(f"Error: env file not found: {env_path}", file=sys.stderr)
        sys.exit(2)

    load_dotenv(dotenv_path=str(env_path))


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser for mcp-blog-server CLI."""
    parser = argparse.ArgumentParser(
        prog="mcp-blog-server",
        description="Serve the blog website and its MCP endpoint.",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind to (default: 127.0.0.1 or HOST env var).",
    )
    parser.add_argument(
        "--web-port",
        type=int,
        default=None,
        help="Port for the website (default: 3000 or WEB_PORT env var).",
    )
    parser.add_argument(
        "--mcp-port",
        type=int,
        default=None,
        help="Port for the MCP endpoint (default: 3001 or MCP_PORT env var).",
    )
    parser.add_argument(
        "--only",
        choices=["web", "mcp"],
        default=None,
        help="Serve only one of the two apps.",
    )
    parser.add_argument(
        "--env",
        dest="env_file",
        default=None,
        help="Path to .env file (default: .env in current directory, if present).",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )
    return parser


async def _serve_all(servers) -> None:
    await asyncio.gather(*(server.serve() for server in servers))


def run_server(args: argparse.Namespace) -> int:
    """Run the selected apps with the given arguments."""
    import uvicorn

    from mcp_blog.core.otel_config import setup_opentelemetry
    from mcp_blog.infrastructure.app_factory import AppFactory
    from mcp_blog.main import create_mcp_app, create_web_app
    from mcp_blog.version import VERSION

    factory = AppFactory()
    settings = factory.get_settings()
    otel_config = setup_opentelemetry(
        "mcp-blog",
        VERSION,
        log_level=settings.log_level,
        debug_mode=settings.debug_mode,
        logs_dir=Path(settings.app_log_dir),
    )

    host = args.host or settings.host
    configs = []
    if args.only in (None, "web"):
        web_app = create_web_app(factory)
        otel_config.instrument_fastapi(web_app)
        port = args.web_port or settings.web_port
        configs.append(uvicorn.Config(web_app, host=host, port=port, log_config=None))
        print(f"Blog website on http://{host}:{port}")
    if args.only in (None, "mcp"):
        mcp_app = create_mcp_app(factory)
        otel_config.instrument_fastapi(mcp_app)
        port = args.mcp_port or settings.mcp_port
        configs.append(uvicorn.Config(mcp_app, host=host, port=port, log_config=None))
        print(f"MCP endpoint on http://{host}:{port}/mcp")

    logger.info(f"Starting mcp-blog {VERSION} (posts_dir={settings.posts_dir}, logs={otel_config.get_log_file_path()})")
    try:
        asyncio.run(_serve_all([uvicorn.Server(config) for config in configs]))
    except KeyboardInterrupt:
        logger.info("Shutdown requested")
    return 0


def main() -> None:
    """Main entry point for mcp-blog-server CLI."""
    parser = build_parser()
    args = parser.parse_args()

    if args.version:
        from mcp_blog.version import VERSION
        print(f"mcp-blog-server version {VERSION}")
        sys.exit(0)

    # Apply env file first (before settings are loaded)
    if args.env_file:
        _apply_env_file(Path(args.env_file).expanduser())
    else:
        cwd_env = Path.cwd() / ".env"
        if cwd_env.exists():
            _apply_env_file(cwd_env)

    sys.exit(run_server(args))


if __name__ == "__main__":
    main()
