"""Agent loop, prompt rendering, tool dispatch, model clients and result extraction."""
