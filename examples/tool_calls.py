import asyncio
import json
import os
import sys

# Add the source directory to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from chatbridge import (
    ArgsSchema,
    EventType,
    FinishReason,
    Message,
    MessageRole,
    TextContent,
    Tool,
    ToolResult,
    get_model,
    new_provider,
)


# 1. Define the tool implementation and its descriptor
def get_weather(location: str, unit: str = "celsius") -> str:
    return f"The weather in {location} is 25 degrees {unit}."


weather_tool = Tool(
    name="get_weather",
    description="Get the weather for a location",
    args_schema=[
        ArgsSchema(
            name="location",
            type=str,
            description="The city and state, e.g. San Francisco, CA",
        ),
        ArgsSchema(
            name="unit",
            type=str,
            description="The unit of temperature",
            enum=["celsius", "fahrenheit"],
            required=False,
        ),
    ],
)


async def main():
    provider = new_provider(
        "openai",
        api_key=os.getenv("OPENAI_API_KEY"),
        model=get_model("gpt-4.1-mini"),
        max_tokens=1000,
    )

    user_input = "What is the weather in Tokyo?"
    history = [Message(role=MessageRole.USER, parts=[TextContent(text=user_input)])]
    print(f"User: {user_input}")

    # 2. Stream the first turn and watch the tool call being assembled
    response = None
    async with provider.stream_response(history, [weather_tool]) as events:
        async for event in events:
            if event.type == EventType.TOOL_USE_START:
                print(f"Tool call started: {event.tool_call.id}")
            elif event.type == EventType.TOOL_USE_STOP:
                print(f"  - {event.tool_call.name}({event.tool_call.input})")
            elif event.type == EventType.ERROR:
                print(f"Error: {event.error}")
                return
            elif event.type == EventType.COMPLETE:
                response = event.response

    if response is None or response.finish_reason != FinishReason.TOOL_CALLS:
        print(f"Assistant: {response.content if response else ''}")
        return

    # 3. Run the tools and send the results back
    history.append(Message(role=MessageRole.ASSISTANT, parts=list(response.tool_calls)))
    results = [
        ToolResult(
            tool_call_id=call.id,
            name=call.name,
            content=get_weather(**json.loads(call.input)),
        )
        for call in response.tool_calls
    ]
    history.append(Message(role=MessageRole.TOOL, parts=results))

    final = await provider.send_messages(history, [weather_tool])
    print(f"Assistant: {final.content}")


if __name__ == "__main__":
    asyncio.run(main())
