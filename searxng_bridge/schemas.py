from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

JSONRPC_VERSION = "2.0"


class McpRequest(BaseModel):
    jsonrpc: str
    id: Optional[Any] = None
    method: str
    params: Optional[Any] = None


class McpResponse(BaseModel):
    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    result: Dict[str, Any]


class TextContent(BaseModel):
    type: str = "text"
    text: str


class ToolResult(BaseModel):
    content: List[TextContent]
    is_error: bool = Field(default=False, serialization_alias="isError")

    @classmethod
    def text(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def error(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)], is_error=True)

    def to_payload(self) -> Dict[str, Any]:
        """Wire shape: ``isError`` only appears on failures."""
        payload: Dict[str, Any] = {"content": [item.model_dump() for item in self.content]}
        if self.is_error:
            payload = {"isError": True, **payload}
        return payload


class ToolDescriptor(BaseModel):
    name: str
    description: str
    input_schema: Dict[str, Any] = Field(serialization_alias="inputSchema")

    model_config = {"populate_by_name": True}

    @classmethod
    def single_string_arg(cls, name: str, description: str, arg: str) -> "ToolDescriptor":
        return cls(
            name=name,
            description=description,
            input_schema={
                "type": "object",
                "properties": {arg: {"type": "string"}},
                "required": [arg],
            },
        )
