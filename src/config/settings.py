"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use PPLUA_ prefix (e.g., PPLUA_EMIT_LF=false).

Settings can also be loaded from a .env file in the project root.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Preprocessor configuration via environment variables.

    Environment variables use PPLUA_ prefix.

    Examples:
        PPLUA_BLOCK_OPEN=.lua
        PPLUA_EMIT_LF=false
        PPLUA_LUA_PATHS='["./lib/?.lua"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="PPLUA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Block delimiters (request-style, at start of line)
    block_open: str = Field(
        default=".lua",
        description="Request that opens a script block",
    )

    block_close: str = Field(
        default=".endlua",
        description="Request that closes a script block",
    )

    # Inline expression delimiters
    inline_open: str = Field(
        default="\\lua'",
        description="Literal sequence that opens an inline expression",
    )

    inline_close: str = Field(
        default="'",
        description="Single character that closes an inline expression",
    )

    inline_wrap: str = Field(
        default="return tostring({expression})",
        description="Chunk template used to coerce an inline expression to text",
    )

    # Output configuration
    emit_lf: bool = Field(
        default=True,
        description="Emit .lf directives so groff reports original line numbers",
    )

    unique_prefix: str = Field(
        default="_lua",
        description="Default prefix for lroff.unique() names",
    )

    # Script engine configuration
    preamble_files: List[str] = Field(
        default_factory=list,
        description="Lua files executed before any input is processed",
    )

    lua_paths: List[str] = Field(
        default_factory=list,
        description="Extra package.path entries for the Lua runtime",
    )

    @field_validator("inline_close")
    @classmethod
    def closeChar_check(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("inline_close must be exactly one character")
        return value

    @field_validator("block_open", "block_close", "inline_open")
    @classmethod
    def marker_check(cls, value: str) -> str:
        if not value:
            raise ValueError("delimiters must not be empty")
        return value

    def inlineChunk_make(self, expression: str) -> str:
        """
        Build the chunk that evaluates an inline expression as text.

        Args:
            expression: Raw text found between the inline delimiters

        Returns:
            Source text to submit to the evaluator

        Example:
            >>> settings = AppSettings()
            >>> settings.inlineChunk_make("1+1")
            'return tostring(1+1)'
        """
        return self.inline_wrap.format(expression=expression)

    def lfDirective_make(self, line: int, filename: str) -> str:
        """Line-accounting request for ``line`` of ``filename``."""
        return f".lf {line} {filename}"


# Singleton instance - import this in your code
appsettings = AppSettings()
