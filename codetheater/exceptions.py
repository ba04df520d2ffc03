"""
codetheater.exceptions - Custom exception classes.

All Code Theater exceptions inherit from CodeTheaterError.
"""


class CodeTheaterError(Exception):
    """Base exception for all Code Theater errors."""

    pass


class ConfigError(CodeTheaterError):
    """Configuration loading or validation error."""

    pass


class GitError(CodeTheaterError):
    """Git command or repository error."""

    pass


class NoCommitsError(GitError):
    """The requested commit range is empty."""

    def __init__(self, from_ref: str | None, to_ref: str):
        self.from_ref = from_ref
        self.to_ref = to_ref
        super().__init__(f"No commits found between {from_ref or 'the beginning'} and {to_ref}")


class LLMError(CodeTheaterError):
    """LLM backend or prompt error."""

    pass


class LLMResponseError(LLMError):
    """LLM returned malformed or unexpected response."""

    pass


class CacheError(CodeTheaterError):
    """Cache or session store error."""

    pass
