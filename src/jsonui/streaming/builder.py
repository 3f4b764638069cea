"""
Streaming Tree Builder
Turns a fragment stream into a monotonically growing element tree.
"""

import asyncio
import codecs
import time
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterable, AsyncIterator, Iterable

from ..core import (
    Settings,
    StreamError,
    StreamParseError,
    StreamSourceError,
    TreeDiffError,
    get_logger,
    get_settings,
    new_generation_id,
)
from ..monitoring import metrics_collector
from ..tree import Element, Patch, Tree, diff, document_to_tree
from .parser import PartialDocument, PartialJSONParser

logger = get_logger(__name__)

Fragment = str | bytes


async def coalesce(fragments: AsyncIterable[str], min_chars: int) -> AsyncIterator[str]:
    """Join consecutive fragments until at least `min_chars` characters are buffered."""
    buffer: list[str] = []
    size = 0
    async for fragment in fragments:
        buffer.append(fragment)
        size += len(fragment)
        if size >= min_chars:
            yield "".join(buffer)
            buffer, size = [], 0
    if buffer:
        yield "".join(buffer)


class StreamState(str, Enum):
    """Builder lifecycle states."""

    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    ERRORED = "errored"

    @property
    def terminal(self) -> bool:
        return self in (StreamState.COMPLETE, StreamState.CANCELLED, StreamState.ERRORED)


@dataclass(frozen=True)
class StreamUpdate:
    """Patches produced by one fragment, with the tree they were applied to."""

    patches: list[Patch]
    tree: Tree
    state: StreamState


class StreamingTreeBuilder:
    """
    Builds a Tree from a JSON document received in arbitrary fragments.

    After every fragment the parser snapshot is normalized into a target tree
    and the difference is applied as patches, so the tree only ever grows.
    Parse and source failures never escape `feed`/`stream`: the builder
    freezes the last good tree and records the error instead.

    Examples:
        >>> builder = StreamingTreeBuilder()
        >>> _ = builder.feed('{"root": "t", "elements": {"t": {"type": "Text", "props": {"content": "Hel')
        >>> builder.tree.elements["t"].props
        {'content': 'Hel'}
    """

    def __init__(self, settings: Settings | None = None, batch_size: int | None = None) -> None:
        settings = settings or get_settings()
        self.parser = PartialJSONParser(
            max_size=settings.stream_max_document_size,
            max_depth=settings.stream_max_depth,
        )
        self.batch_size = settings.stream_batch_size if batch_size is None else batch_size
        self.generation_id = new_generation_id()
        self.tree = Tree()
        self.state = StreamState.IDLE
        self.error: StreamError | None = None
        self.fragments = 0
        self.chars = 0

        self._snapshot = PartialDocument(value=None)
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._cancel_requested = False
        self._in_stream = False
        self._started_at: float | None = None

    @property
    def snapshot(self) -> PartialDocument:
        """Last parser snapshot (kept after errors)."""
        return self._snapshot

    def feed(self, fragment: Fragment) -> list[Patch]:
        """
        Consume one fragment and apply the resulting patches.

        Returns:
            Patches applied to `tree` (empty once terminal)
        """
        if self.state.terminal:
            logger.debug("fragment_ignored", generation_id=self.generation_id, state=self.state.value)
            return []
        if self._cancel_requested:
            self._finalize(StreamState.CANCELLED)
            return []
        if self.state is StreamState.IDLE:
            self._begin()

        try:
            text = self._decode(fragment)
            self.fragments += 1
            self.chars += len(text)
            metrics_collector.record_fragment()
            self.parser.feed(text)
        except StreamParseError as e:
            self._fail(e)
            return []
        return self._sync()

    def finish(self) -> Tree:
        """
        Signal end of input and freeze the tree.

        An incomplete document leaves the builder ERRORED.
        """
        if self.state.terminal:
            return self.tree
        if self._cancel_requested:
            self._finalize(StreamState.CANCELLED)
            return self.tree
        if self.state is StreamState.IDLE:
            self._begin()

        try:
            tail = self._decoder.decode(b"", final=True)
            if tail:
                self.parser.feed(tail)
                self._sync()
                if self.state.terminal:
                    return self.tree
            self.parser.close()
        except UnicodeDecodeError as e:
            self._fail(StreamParseError(f"Truncated UTF-8 sequence: {e.reason}", self.parser.position))
            return self.tree
        except StreamParseError as e:
            self._fail(e)
            return self.tree

        if not self.state.terminal:
            self._finalize(StreamState.COMPLETE)
        return self.tree

    def cancel(self) -> None:
        """
        Request cancellation.

        Applied patches stay applied. Inside `stream` the request takes effect
        before the next fragment is consumed.
        """
        if self.state.terminal:
            return
        self._cancel_requested = True
        if not self._in_stream:
            self._finalize(StreamState.CANCELLED)

    async def stream(self, source: AsyncIterable[Fragment] | Iterable[Fragment]) -> AsyncIterator[StreamUpdate]:
        """
        Consume a fragment source, yielding an update per productive fragment
        and a final update carrying the terminal state.

        Raises:
            asyncio.CancelledError: Propagated after marking the builder CANCELLED
        """
        self._in_stream = True
        try:
            fragments = self._fragments(source)
            if self.batch_size > 1:
                fragments = coalesce(fragments, self.batch_size)
            iterator = fragments.__aiter__()

            while not self.state.terminal:
                if self._cancel_requested:
                    self._finalize(StreamState.CANCELLED)
                    break
                try:
                    text = await iterator.__anext__()
                except StopAsyncIteration:
                    self.finish()
                    break
                except asyncio.CancelledError:
                    self._finalize(StreamState.CANCELLED)
                    raise
                except StreamError as e:
                    self._fail(e)
                    break
                except Exception as e:
                    self._fail(StreamSourceError(f"Fragment source failed: {e}", e))
                    break

                patches = self.feed(text)
                if patches:
                    yield StreamUpdate(patches=patches, tree=self.tree, state=self.state)
        finally:
            self._in_stream = False

        yield StreamUpdate(patches=[], tree=self.tree, state=self.state)

    async def run(self, source: AsyncIterable[Fragment] | Iterable[Fragment]) -> Tree:
        """Consume the whole source and return the frozen tree."""
        async for _ in self.stream(source):
            pass
        return self.tree

    # ------------------------------------------------------------------

    async def _fragments(self, source: AsyncIterable[Fragment] | Iterable[Fragment]) -> AsyncIterator[str]:
        if isinstance(source, AsyncIterable):
            async for fragment in source:
                yield self._decode(fragment)
        else:
            for fragment in source:
                yield self._decode(fragment)

    def _decode(self, fragment: Fragment) -> str:
        if isinstance(fragment, str):
            return fragment
        try:
            return self._decoder.decode(fragment)
        except UnicodeDecodeError as e:
            raise StreamParseError(f"Invalid UTF-8: {e.reason}", self.parser.position) from e

    def _begin(self) -> None:
        self.state = StreamState.STREAMING
        self._started_at = time.perf_counter()
        logger.info("stream_started", generation_id=self.generation_id)

    def _sync(self) -> list[Patch]:
        self._snapshot = self.parser.snapshot()
        target = document_to_tree(
            self._snapshot.value,
            open_paths=self._snapshot.open_paths,
            partial_path=self._snapshot.partial_path,
        )
        try:
            patches = diff(self.tree, self._keep_existing(target))
        except TreeDiffError as e:
            self._fail(StreamError(f"Document redefined an element: {e}"))
            return []

        self.tree.apply_patches(patches)
        for patch in patches:
            metrics_collector.record_patch(patch.op)
        return patches

    def _keep_existing(self, target: Tree) -> Tree:
        """Carry over anything the current tree has that `target` lacks."""
        elements: dict[str, Element] = {}
        for element_id, element in self.tree.elements.items():
            incoming = target.elements.get(element_id)
            if incoming is None:
                elements[element_id] = element
                continue
            merged = incoming.model_copy(update={"props": {**element.props, **incoming.props}})
            if not set(element.children) <= set(incoming.children):
                merged.children = list(element.children)
            elements[element_id] = merged
        for element_id, element in target.elements.items():
            elements.setdefault(element_id, element)
        return Tree(root=target.root or self.tree.root, elements=elements)

    def _fail(self, error: StreamError) -> None:
        self.error = error
        logger.warning(
            "stream_failed",
            generation_id=self.generation_id,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._finalize(StreamState.ERRORED)

    def _finalize(self, state: StreamState) -> None:
        self.state = state
        self.tree.freeze()
        duration = time.perf_counter() - self._started_at if self._started_at is not None else 0.0
        metrics_collector.record_stream_outcome(state.value, duration)
        logger.info(
            "stream_finished",
            generation_id=self.generation_id,
            state=state.value,
            elements=len(self.tree.elements),
            fragments=self.fragments,
            chars=self.chars,
            duration=round(duration, 3),
        )


__all__ = ["StreamState", "StreamUpdate", "StreamingTreeBuilder", "Fragment"]
