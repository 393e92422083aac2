"""Main entry point for the MCP Grounding server."""

import asyncio
import sys

from mcp_grounding import Settings
from mcp_grounding.mcp import GroundingMCPServer


async def main() -> None:
    """Main entry point."""
    try:
        settings = Settings()

        server = GroundingMCPServer(settings)
        await server.run()

    except KeyboardInterrupt:
        print("\nServer stopped by user", file=sys.stderr)
    except Exception as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
