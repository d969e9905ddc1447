"""
agentcore - Conversational Agent Orchestration Core
===================================================

Sits between a chat client and one or more LLM providers. For each
(user input, session id) it assembles a bounded prompt from session memory,
calls the configured provider (optionally with tools), runs the requested
tools and returns an answer while updating session memory.

This package provides:
- Agent coordinator with a bounded tool loop
- Conversation memory with summarization and session eviction
- Token-budgeted prompt assembly
- Tool registry and executor with JSON Schema validation
- OpenAI, Anthropic and Gemini adapters behind one interface
- Typed errors and a monitoring error handler
"""

__version__ = "1.0.0"
