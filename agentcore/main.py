"""
agentcore - Main Entry Point
============================

Composition root plus a small interactive console.

`build_agent()` wires every component explicitly, leaves first:

    ErrorHandler
    AIService (selected from configured credentials)
    StateManager, MemoryManager (LLM summarizer)
    PromptManager, ToolExecutor (built-in tools), ContentPolicy
    Agent

Run with:
    python -m agentcore.main

Or after installing:
    agentcore

Console commands: /clear (forget this session), /tools, /quit
"""

import asyncio
import uuid

from agentcore.agent import Agent, AgentResponse, ContentPolicy, PromptManager, ToolExecutor
from agentcore.ai import AIService, create_ai_service, make_llm_summarizer
from agentcore.errors import ErrorHandler, MonitoringSink
from agentcore.memory import MemoryManager, StateManager
from agentcore.tools import ToolRegistry
from agentcore.tools.builtin import register_builtin_tools
from agentcore.utils.config import Config, get_config
from agentcore.utils.logger import Logger

main_logger = Logger("Main")


def build_agent(
    config: Config | None = None,
    ai: AIService | None = None,
    sink: MonitoringSink | None = None,
    register_builtins: bool = True
) -> Agent:
    """
    Build a fully wired Agent.

    Args:
        config: Configuration (loaded from the environment when omitted)
        ai: AI service to use instead of the configured provider
        sink: Monitoring sink for the ErrorHandler
        register_builtins: Register getTime/calculator/getState/setState

    Returns:
        The Agent, ready for handle_request()

    Raises:
        ValueError: If no AI provider is configured and `ai` is not given
    """
    config = config or get_config()

    error_handler = ErrorHandler(
        sink=sink,
        rate_threshold=config.monitoring.rate_threshold,
        rate_window_seconds=config.monitoring.rate_window_seconds,
    )

    ai = ai or create_ai_service(config)

    state = StateManager(
        ttl_seconds=config.memory.session_ttl_seconds,
        max_sessions=config.memory.max_sessions,
    )
    memory = MemoryManager(
        summarizer=make_llm_summarizer(ai, timeout_seconds=config.agent.provider_timeout_seconds),
        max_conversation_length=config.memory.max_conversation_length,
        min_compaction_size=config.memory.min_compaction_size,
        recent_window=config.memory.recent_window,
        ttl_seconds=config.memory.session_ttl_seconds,
        max_sessions=config.memory.max_sessions,
        max_long_term_entries=config.memory.max_long_term_entries,
        max_relevant_memories=config.memory.max_relevant_memories,
    )
    prompts = PromptManager(
        memory,
        system_prompt=config.prompt.system_prompt,
        max_tokens=config.prompt.max_prompt_tokens,
    )

    registry = ToolRegistry()
    if register_builtins:
        register_builtin_tools(registry)
    tools = ToolExecutor(registry, state=state)

    return Agent(
        ai=ai,
        memory=memory,
        prompts=prompts,
        tools=tools,
        state=state,
        error_handler=error_handler,
        policy=ContentPolicy(config.agent.blocked_terms),
        max_tool_iterations=config.agent.max_tool_iterations,
        provider_timeout_seconds=config.agent.provider_timeout_seconds,
        max_output_tokens=config.agent.max_output_tokens,
        max_input_chars=config.agent.max_input_chars,
        slow_request_ms=config.agent.slow_request_ms,
    )


async def main():
    """
    Interactive console session.

    Reads lines from stdin and prints the agent's answers.
    """
    main_logger.info("Starting agentcore console...")

    try:
        agent = build_agent()
    except ValueError as e:
        main_logger.error("Failed to start", e)
        return

    session_id = f"console-{uuid.uuid4().hex[:8]}"
    main_logger.info(f"Session {session_id} ready. Type /quit to exit.")

    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break

        line = line.strip()
        if not line:
            continue
        if line == "/quit":
            break
        if line == "/clear":
            await agent.clear_session(session_id)
            print("Session cleared.")
            continue
        if line == "/tools":
            print(", ".join(agent.tools.registry.list_names()) or "(no tools)")
            continue

        result = await agent.handle_request(line, session_id)
        if isinstance(result, AgentResponse):
            print(result.text)
        else:
            print(result.user_facing_message)

    main_logger.info("Goodbye")


def run():
    """
    Synchronous entry point.

    This is called when running with the `agentcore` command.
    """
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
