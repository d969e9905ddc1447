"""
Agent System
============

The agent coordinates one turn at a time for each session:
1. Validates input and applies the content policy
2. Builds a token-budgeted prompt from memory
3. Calls the AI service, running requested tools in a bounded loop
4. Stores the turn and returns the answer (or a MonitoredError)

This module provides:
- Agent: Main coordinator (handle_request)
- PromptManager: Token-budgeted prompt assembly
- ToolExecutor: Tool registration and invocation
- ContentPolicy: Blocked-term content policy
"""

from agentcore.agent.core import Agent, AgentResponse, TurnState
from agentcore.agent.governance import ContentPolicy
from agentcore.agent.prompt import PromptManager, PromptRequest, estimate_token_count
from agentcore.agent.tools_executor import ToolCallResult, ToolExecutor

__all__ = [
    "Agent",
    "AgentResponse",
    "ContentPolicy",
    "PromptManager",
    "PromptRequest",
    "ToolCallResult",
    "ToolExecutor",
    "TurnState",
    "estimate_token_count",
]
