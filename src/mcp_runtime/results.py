"""Call result envelope returned by every tool invocation."""

import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel


def _normalize_block(item: Any) -> dict[str, Any]:
    """Convert a content item into a plain dict with a ``type`` key."""
    if isinstance(item, BaseModel):
        return item.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(item, dict):
        if "type" in item:
            return dict(item)
        if "text" in item:
            return {"type": "text", **item}
        return {"type": "json", "json": item}
    if isinstance(item, str):
        return {"type": "text", "text": item}
    return {"type": "text", "text": str(item)}


def _extract_content(result: Any) -> list[dict[str, Any]]:
    """Normalize various result formats into a list of content blocks."""
    extracted = None
    if hasattr(result, "content"):
        extracted = result.content
    elif isinstance(result, dict) and "content" in result:
        extracted = result["content"]

    if extracted is None:
        return []
    if isinstance(extracted, str | dict | BaseModel):
        extracted = [extracted]
    return [_normalize_block(item) for item in extracted]


@dataclass
class CallResult:
    """The outcome of one tool call.

    A tool that reports its own failure still yields a ``CallResult``; check
    ``is_error`` rather than catching exceptions.

    Attributes:
        is_error: True when the server flagged the call as failed
        content: Content blocks, each a dict with a ``type`` discriminator
        structured_content: Structured output, when the tool returned any
    """

    is_error: bool = False
    content: list[dict[str, Any]] = field(default_factory=list)
    structured_content: dict[str, Any] | None = None

    @classmethod
    def from_raw(cls, result: Any) -> "CallResult":
        """Build a ``CallResult`` from an MCP ``CallToolResult`` or an equivalent dict."""
        if isinstance(result, dict):
            is_error = bool(result.get("isError", False))
            structured = result.get("structuredContent")
        else:
            is_error = bool(getattr(result, "isError", False))
            structured = getattr(result, "structuredContent", None)
        return cls(
            is_error=is_error,
            content=_extract_content(result),
            structured_content=structured if isinstance(structured, dict) else None,
        )

    @classmethod
    def from_error(cls, message: str) -> "CallResult":
        """Create an error result holding a single text block."""
        return cls(is_error=True, content=[{"type": "text", "text": message}])

    def text(self) -> str | None:
        """Return the text blocks joined by newlines, or None if there are none."""
        parts = [block["text"] for block in self.content if block.get("type") == "text" and "text" in block]
        return "\n".join(parts) if parts else None

    def markdown(self) -> str | None:
        """Return markdown content, or None if the result has none.

        Markdown is either a ``markdown`` block or an embedded resource whose
        mime type is ``text/markdown``. Callers wanting a plain-text fallback
        should use ``result.markdown() or result.text()``.
        """
        parts = []
        for block in self.content:
            kind = block.get("type")
            if kind == "markdown":
                value = block.get("markdown", block.get("text"))
                if value is not None:
                    parts.append(value)
            elif kind == "resource":
                resource = block.get("resource") or {}
                if resource.get("mimeType") == "text/markdown" and "text" in resource:
                    parts.append(resource["text"])
        return "\n".join(parts) if parts else None

    def json(self) -> Any:
        """Return structured output, or the first text block that parses as JSON."""
        if self.structured_content is not None:
            return self.structured_content
        for block in self.content:
            if block.get("type") == "json" and "json" in block:
                return block["json"]
            if block.get("type") == "text":
                try:
                    return json.loads(block.get("text", ""))
                except ValueError:
                    continue
        return None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire envelope ``{"isError": ..., "content": [...]}``.

        Structured output is left out; read it through :meth:`json`.
        """
        return {"isError": self.is_error, "content": self.content}

    def __str__(self) -> str:
        return f"CallResult(is_error={self.is_error}, content={self.content})"
