"""FastMCP server instance – mounted inside FastAPI."""

from fastmcp import FastMCP

mcp = FastMCP(
    name="SacredSix",
    instructions=(
        "Sacred Six tools for listing tasks eligible for today, choosing up to six "
        "tasks for the day, reading completion statistics and asking for AI "
        "recommendations. All tools require the caller's X-User-Id."
    ),
)

# Import tool modules to register @mcp.tool decorators
from app.mcp.tools import today_tools, stats_tools  # noqa: E402, F401
