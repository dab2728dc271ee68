import asyncio
import os
import sys

# Add the source directory to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from chatbridge import Message, MessageRole, TextContent, get_model, new_provider


async def main():
    # 1. Build a provider
    provider = new_provider(
        "openai",
        api_key=os.getenv("OPENAI_API_KEY"),
        model=get_model("gpt-4.1-mini"),
        system_message="You are a helpful assistant.",
    )

    # 2. Prepare messages
    messages = [Message(role=MessageRole.USER, parts=[TextContent(text="Tell me a joke.")])]

    # 3. Send and wait for the full answer
    print("Sending request...")
    try:
        response = await provider.send_messages(messages)
        print(f"Response: {response.content}")
        print(f"Usage: {response.usage}")
    except Exception as e:
        print(f"Error: {e}")


if __name__ == "__main__":
    asyncio.run(main())
