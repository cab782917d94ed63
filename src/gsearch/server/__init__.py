"""Protocol front ends for gsearch (MCP over stdio)."""
