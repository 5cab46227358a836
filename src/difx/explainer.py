"""Model invocation for diff explanation."""

import asyncio

from .providers import Provider
from .render import Renderer

# Queue item marking a clean end of stream
_DONE = object()


async def explain(provider: Provider, prompt: str) -> str:
    """
    Send the prompt and wait for the whole explanation.

    Args:
        provider: Adapter for the configured backend
        prompt: Full prompt text to send

    Returns:
        Explanation text, stripped

    Raises:
        ProviderError, TransportError, DecodeError: Propagated from the provider
    """
    return await provider.complete(prompt)


async def _produce(provider: Provider, prompt: str, queue: asyncio.Queue) -> None:
    try:
        async for chunk in provider.stream(prompt):
            queue.put_nowait(chunk)
    except Exception as e:
        # Handed to the consumer, which re-raises it
        queue.put_nowait(e)
    else:
        queue.put_nowait(_DONE)


async def stream_explanation(provider: Provider, prompt: str, renderer: Renderer) -> str:
    """
    Stream the explanation to the terminal as it arrives.

    A producer task reads the provider stream and queues text chunks in
    arrival order; this coroutine renders them. On a provider error the
    renderer is aborted, output already written stays, and the error is
    raised.

    Returns:
        Full explanation text, stripped
    """
    queue: asyncio.Queue = asyncio.Queue()
    producer = asyncio.create_task(_produce(provider, prompt, queue))
    chunks = []

    try:
        while True:
            item = await queue.get()
            if item is _DONE:
                break
            if isinstance(item, Exception):
                renderer.abort()
                raise item
            chunks.append(item)
            renderer.feed(item)
    finally:
        if not producer.done():
            producer.cancel()
        await asyncio.gather(producer, return_exceptions=True)

    renderer.finish()
    return "".join(chunks).strip()
