from __future__ import annotations
import logging
import traceback
from dataclasses import dataclass
from typing import Any, Callable, List, Optional


logger = logging.getLogger(__name__)


def release_handle(obj: Any) -> None:
    """
    For memory objects (images, buffers): pyopencl frees them on release().
    """
    obj.release()


def drop_reference(obj: Any) -> None:
    """
    Contexts, programs and kernels have no release() in pyopencl; the native
    object is freed when its last Python reference goes. The stack holds that
    reference and discards it right after this call.
    """


def finish_and_release(queue: Any) -> None:
    """
    Drain the queue, then finalize it through its context-manager exit.
    """
    try:
        queue.finish()
    finally:
        queue.__exit__(None, None, None)


def clear_exception_frames(exc: Optional[BaseException]) -> None:
    """
    Drop the locals of finished frames held by exc and its causes, so device
    handles referenced from a failed stage do not outlive the stack.
    """
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        traceback.clear_frames(exc.__traceback__)
        exc = exc.__cause__ or exc.__context__


@dataclass
class _Entry:
    name: str
    handle: Any
    release: Callable[[Any], None]


class ResourceStack:
    """
    Ledger of device resources owned by one render.
    The stack is meant to hold the last reference to every handle; resources
    are released exactly once, newest first.
    """

    def __init__(self, on_release: Optional[Callable[[str, Any], None]] = None):
        self._entries: List[_Entry] = []
        self._on_release = on_release
        self.released: List[str] = []

    def push(self, name: str, handle: Any,
             release: Callable[[Any], None] = release_handle) -> Any:
        self._entries.append(_Entry(name, handle, release))
        logger.debug("Acquired %s", name)
        return handle

    @property
    def names(self) -> List[str]:
        return [e.name for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def release_all(self) -> None:
        """
        Release every held resource in reverse creation order.
        A failing release is logged and does not stop the remaining ones.
        """
        while self._entries:
            entry = self._entries.pop()
            try:
                entry.release(entry.handle)
            except Exception as e:
                logger.exception("Error releasing %s: %s", entry.name, e)
                clear_exception_frames(e)
            finally:
                self.released.append(entry.name)
                if self._on_release is not None:
                    self._on_release(entry.name, entry.handle)
                logger.debug("Released %s", entry.name)
                # Last reference: handles without release() are freed here.
                del entry

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        clear_exception_frames(exc_val)
        self.release_all()
