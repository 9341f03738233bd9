"""Agent framework integrations.

Available integrations:
- sqlgateway.integrations.mcp - MCP (Model Context Protocol) server
"""
