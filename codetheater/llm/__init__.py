"""
codetheater.llm - LLM access for the screenplay director.

- client: litellm wrapper with retry logic
- director: stateful director conversation
- templates: Jinja2 prompt templates
- parsing: JSON extraction from LLM responses
"""

from __future__ import annotations
