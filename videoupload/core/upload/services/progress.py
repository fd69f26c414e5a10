"""
Progress computation.

Turns (bytes transferred, time) samples into percentage, throughput and ETA.
Timing state is an explicit ProgressState value passed in and returned, so
concurrent uploads never share it.
"""
import time
from typing import Tuple, Optional

from ..models import ProgressSample, ProgressState


def sample(
    state: ProgressState,
    loaded_bytes: int,
    total_bytes: int,
    current_chunk: int,
    total_chunks: int,
    now: float
) -> Tuple[ProgressSample, ProgressState]:
    """
    Compute a progress sample.

    Args:
        state: Timing state from the previous sample
        loaded_bytes: Bytes transferred so far
        total_bytes: Total bytes to transfer
        current_chunk: Chunks completed so far
        total_chunks: Total number of chunks
        now: Current time in seconds (same clock as the state)

    Returns:
        Tuple of (sample, state for the next call)
    """
    elapsed = now - state.last_sample_time
    delta = loaded_bytes - state.last_loaded_bytes

    speed = delta / elapsed if elapsed > 0 else 0.0
    remaining = total_bytes - loaded_bytes
    eta = remaining / speed if speed > 0 else 0.0
    percentage = (loaded_bytes / total_bytes) * 100 if total_bytes > 0 else 100.0

    progress = ProgressSample(
        loaded_bytes=loaded_bytes,
        total_bytes=total_bytes,
        percentage=percentage,
        bytes_per_second=speed,
        seconds_remaining=eta,
        current_chunk=current_chunk,
        total_chunks=total_chunks
    )
    return progress, ProgressState(last_sample_time=now, last_loaded_bytes=loaded_bytes)


class ProgressTracker:
    """
    Per-upload holder of progress state.

    Create one per upload; instances must not be shared.
    """

    def __init__(self, start_time: Optional[float] = None, clock=time.monotonic):
        self._clock = clock
        self._state = ProgressState(
            last_sample_time=clock() if start_time is None else start_time
        )

    @property
    def state(self) -> ProgressState:
        return self._state

    def sample(
        self,
        loaded_bytes: int,
        total_bytes: int,
        current_chunk: int,
        total_chunks: int
    ) -> ProgressSample:
        """Sample progress at the current clock time."""
        progress, self._state = sample(
            self._state,
            loaded_bytes,
            total_bytes,
            current_chunk,
            total_chunks,
            self._clock()
        )
        return progress
