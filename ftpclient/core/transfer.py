import concurrent.futures
import logging
from typing import Callable, Optional

from ftpclient.core.codes import TRANSFER_COMPLETE
from ftpclient.core.errors import ShortWriteError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 32 * 1024


def copy_stream(reader, writer, buffer_size: int = CHUNK_SIZE,
                progress: Optional[Callable[[int], None]] = None) -> int:
    """
    Copies ``reader`` into ``writer`` until EOF and returns the byte count.

    ``progress`` receives the running total after each chunk.
    """
    total = 0
    while True:
        chunk = reader.read(buffer_size)
        if not chunk:
            break
        written = writer.write(chunk)
        if written is not None and written != len(chunk):
            raise ShortWriteError(len(chunk), written)
        total += len(chunk)
        if progress is not None:
            progress(total)
    return total


def server_to_server(source, destination, source_path: str, destination_path: str,
                     timeout: float = 600.0):
    """
    Transferencia servidor a servidor (FXP): el origen abre un puerto pasivo,
    el destino se conecta a él con PORT, y se espera la respuesta final de
    ambas sesiones en paralelo.
    """
    logger.info(f"Server-to-server transfer {source_path} -> {destination_path}")
    host, port = source.pasv()
    destination.port(host, port)
    destination.stor(destination_path)
    source.retr(source_path)

    errors = []
    with concurrent.futures.ThreadPoolExecutor(max_workers=2) as ex:
        futures = {
            ex.submit(session.get_response, TRANSFER_COMPLETE, timeout): name
            for name, session in (("source", source), ("destination", destination))
        }
        for fut in concurrent.futures.as_completed(futures):
            try:
                reply = fut.result()
                logger.info(f"[{futures[fut]}] {reply.code} {reply.message}")
            except Exception as e:
                logger.error(f"[{futures[fut]}] transfer failed: {e}")
                errors.append(e)

    if errors:
        raise errors[0]
    logger.info("✓ Server-to-server transfer complete")
