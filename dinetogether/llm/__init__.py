"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Send chat-completion requests in JSON mode and decode the reply.
- Report failures as ``None`` so callers can switch to their fallback branch.
"""
