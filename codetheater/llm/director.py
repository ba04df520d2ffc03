"""
codetheater.llm.director - The director conversation.

The director is one ongoing chat: the system prompt fixes the genre and
screenplay format, and every scene request is appended to the history so
later scenes can call back to earlier ones.
"""

from __future__ import annotations

import uuid

from codetheater.llm.client import LLMClient, Message

# Older turns beyond this are dropped; the system prompt is always kept.
MAX_HISTORY_MESSAGES = 40


class DirectorSession:
    """A stateful chat with the screenplay director."""

    def __init__(
        self,
        client: LLMClient,
        system_prompt: str,
        session_id: str | None = None,
        max_history: int = MAX_HISTORY_MESSAGES,
    ) -> None:
        self.client = client
        self.system_prompt = system_prompt
        self.session_id = session_id or uuid.uuid4().hex
        self.max_history = max_history
        self.history: list[Message] = []

    @property
    def model(self) -> str:
        return self.client.model

    def messages(self) -> list[Message]:
        return [{"role": "system", "content": self.system_prompt}, *self.history]

    def send(self, prompt: str, console=None, max_tokens: int = 2048) -> str:
        """Send a prompt in the running conversation and return the reply."""
        self.history.append({"role": "user", "content": prompt})
        try:
            reply = self.client.chat(self.messages(), max_tokens=max_tokens, console=console)
        except Exception:
            self.history.pop()
            raise

        self.history.append({"role": "assistant", "content": reply})
        if len(self.history) > self.max_history:
            self.history = self.history[-self.max_history :]
        return reply
