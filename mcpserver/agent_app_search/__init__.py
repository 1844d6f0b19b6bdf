# agent_app_search - 本地应用搜索Agent
from .app_search_agent import (
    ACTION,
    HELPER,
    KEYWORD,
    AppSearchAgent,
    create_app_search_agent,
    get_agent_dependencies,
    get_agent_metadata,
    validate_agent_config,
)

__all__ = [
    "ACTION",
    "HELPER",
    "KEYWORD",
    "AppSearchAgent",
    "create_app_search_agent",
    "get_agent_dependencies",
    "get_agent_metadata",
    "validate_agent_config",
]
