"""Data models and run context shared by the agent loop, tools and model clients."""
