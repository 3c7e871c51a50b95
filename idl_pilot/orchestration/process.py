from __future__ import annotations

import asyncio
import codecs
import sys
from typing import Callable, Optional, Sequence

from idl_pilot.core.errors import ToolNotFound

Sink = Callable[[str], object]


async def _pump(stream: Optional[asyncio.StreamReader], sink: Sink) -> None:
    if stream is None:
        return
    # chunks may end mid code point; the decoder carries the partial bytes over
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        chunk = await stream.read(4096)
        if not chunk:
            break
        text = decoder.decode(chunk)
        if text:
            sink(text)
    tail = decoder.decode(b"", final=True)
    if tail:
        sink(tail)


async def spawn(argv: Sequence[str], tool: str, hint: Optional[str] = None) -> asyncio.subprocess.Process:
    try:
        return await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        raise ToolNotFound(tool, hint) from None
    except PermissionError:
        raise ToolNotFound(tool, hint, reason="permission denied (is it executable?)") from None


async def stream_until_exit(
    proc: asyncio.subprocess.Process,
    stdout: Optional[Sink] = None,
    stderr: Optional[Sink] = None,
) -> int:
    """Forward both pipes as data arrives and return the exit status.

    No timeout: a hung tool blocks here indefinitely.
    """
    out = stdout or sys.stdout.write
    err = stderr or sys.stderr.write
    await asyncio.gather(_pump(proc.stdout, out), _pump(proc.stderr, err))
    return await proc.wait()


async def run_streaming(
    argv: Sequence[str],
    tool: str,
    hint: Optional[str] = None,
    stdout: Optional[Sink] = None,
    stderr: Optional[Sink] = None,
) -> int:
    proc = await spawn(argv, tool, hint)
    return await stream_until_exit(proc, stdout, stderr)
