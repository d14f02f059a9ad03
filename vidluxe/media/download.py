from pathlib import Path
from typing import Optional

import aiofiles
import aiohttp
from loguru import logger

DOWNLOAD_TIMEOUT = 60.0
CHUNK_SIZE = 64 * 1024


async def download_file(
    url: str,
    output_path,
    session: Optional[aiohttp.ClientSession] = None,
    timeout: float = DOWNLOAD_TIMEOUT,
) -> Path:
    """
    Stream `url` into `output_path`.

    A partially written file is removed before the error propagates, so a
    failed download never leaves a truncated file behind. aiohttp and
    timeout errors are raised as-is for the caller to retry or convert.
    """
    output_path = Path(output_path)
    owns_session = session is None
    if owns_session:
        session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout))
    try:
        async with session.get(url) as response:
            response.raise_for_status()
            async with aiofiles.open(output_path, "wb") as f:
                async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                    await f.write(chunk)
    except BaseException:
        output_path.unlink(missing_ok=True)
        raise
    finally:
        if owns_session:
            await session.close()

    logger.debug(f"download_file: {url} -> {output_path}")
    return output_path
