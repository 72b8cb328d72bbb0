"""Tests for the CallResult envelope."""

from mcp.types import CallToolResult, EmbeddedResource, ImageContent, TextContent, TextResourceContents

from mcp_runtime.results import CallResult


def test_from_mcp_result_normalizes_content():
    raw = CallToolResult(
        content=[
            TextContent(type="text", text="first"),
            ImageContent(type="image", data="aGVsbG8=", mimeType="image/png"),
            TextContent(type="text", text="second"),
        ],
        isError=False,
    )
    result = CallResult.from_raw(raw)
    assert result.is_error is False
    assert [block["type"] for block in result.content] == ["text", "image", "text"]
    assert result.text() == "first\nsecond"


def test_error_envelope_is_preserved():
    raw = CallToolResult(content=[TextContent(type="text", text="entity already exists")], isError=True)
    result = CallResult.from_raw(raw)
    assert result.is_error is True
    assert result.content
    assert result.to_dict() == {
        "isError": True,
        "content": [{"type": "text", "text": "entity already exists"}],
    }


def test_from_dict_result():
    result = CallResult.from_raw({"isError": True, "content": [{"type": "text", "text": "boom"}, "plain"]})
    assert result.is_error is True
    assert result.text() == "boom\nplain"


def test_text_is_none_without_text_blocks():
    result = CallResult(content=[{"type": "image", "data": "x", "mimeType": "image/png"}])
    assert result.text() is None


def test_markdown_does_not_fall_back_to_text():
    result = CallResult(content=[{"type": "text", "text": "# Title"}])
    assert result.markdown() is None
    assert (result.markdown() or result.text()) == "# Title"


def test_markdown_from_markdown_block_and_resource():
    resource = EmbeddedResource(
        type="resource",
        resource=TextResourceContents(uri="file:///README.md", mimeType="text/markdown", text="## Usage"),
    )
    result = CallResult.from_raw(
        CallToolResult(content=[resource], isError=False)
    )
    assert result.markdown() == "## Usage"

    direct = CallResult(content=[{"type": "markdown", "markdown": "# Head"}])
    assert direct.markdown() == "# Head"


def test_json_prefers_structured_content():
    raw = CallToolResult(
        content=[TextContent(type="text", text='{"a": 1}')],
        structuredContent={"b": 2},
        isError=False,
    )
    result = CallResult.from_raw(raw)
    assert result.json() == {"b": 2}
    assert set(result.to_dict()) == {"isError", "content"}


def test_json_parses_text_block():
    result = CallResult(content=[{"type": "text", "text": "not json"}, {"type": "text", "text": "[1, 2]"}])
    assert result.json() == [1, 2]
    assert CallResult(content=[{"type": "text", "text": "nope"}]).json() is None


def test_from_error():
    result = CallResult.from_error("Server 'x' returned error: bad")
    assert result.is_error is True
    assert result.text() == "Server 'x' returned error: bad"
