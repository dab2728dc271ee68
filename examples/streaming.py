import asyncio
import os
import sys

# Add the source directory to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from chatbridge import EventType, Message, MessageRole, TextContent, get_model, new_provider


async def main():
    # 1. Build a provider for the Infineon endpoint
    provider = new_provider(
        "infineon",
        api_key=os.getenv("INFINEON_API_KEY"),
        model=get_model("infineon-gpt4o"),
        system_message="You are a poetic assistant.",
    )

    messages = [
        Message(role=MessageRole.USER, parts=[TextContent(text="Write a haiku about recursion.")])
    ]

    print("User: Write a haiku about recursion.")
    print("Assistant: ", end="", flush=True)

    # 2. Consume events until the stream closes
    async with provider.stream_response(messages) as events:
        async for event in events:
            if event.type == EventType.CONTENT_DELTA:
                print(event.content, end="", flush=True)
            elif event.type == EventType.ERROR:
                print(f"\nError: {event.error}")
            elif event.type == EventType.COMPLETE:
                print()
                print(f"Finish reason: {event.response.finish_reason.value}")


if __name__ == "__main__":
    asyncio.run(main())
