from __future__ import annotations

from datetime import datetime
import io
import logging
import os
from typing import Any, Dict

from app.core.config import settings
from app.core.errors import ErrorInterno, ValidacionError

logger = logging.getLogger("gabinete.archivos")

MIME_PDF = "application/pdf"
CARPETA_CASOS = "casos_pdfs"
CAMPO_ARCHIVO = "archivo"


def _max_bytes() -> int:
    return settings.MAX_UPLOAD_MB * 1024 * 1024


def build_storage_key(filename: str) -> str:
    # casos_pdfs/archivo-1718041234567.pdf
    ext = os.path.splitext(filename or "")[1].lower() or ".pdf"
    marca = int(datetime.utcnow().timestamp() * 1000)
    return f"{CARPETA_CASOS}/{CAMPO_ARCHIVO}-{marca}{ext}"


def build_location(storage_key: str) -> str:
    scheme = "https" if settings.MINIO_SECURE else "http"
    return f"{scheme}://{settings.MINIO_ENDPOINT}/{settings.MINIO_BUCKET}/{storage_key}"


def subir_archivo_caso(
    storage,
    filename: str | None,
    content_type: str | None,
    content: bytes,
) -> Dict[str, Any]:
    """
    Sube el PDF de un caso y devuelve la referencia opaca que se guarda en caso.archivo.
    """
    if not filename:
        raise ValidacionError("No se subió ningún archivo PDF válido.")

    if (content_type or "") != MIME_PDF:
        raise ValidacionError("Tipo de archivo no permitido. Solo se aceptan archivos PDF.")

    size = len(content or b"")
    if size == 0:
        raise ValidacionError("Archivo vacío.")
    if size > _max_bytes():
        raise ValidacionError(
            f"El archivo PDF es demasiado grande. El tamaño máximo permitido es {settings.MAX_UPLOAD_MB}MB."
        )

    if not storage:
        logger.error("Servicio de almacenamiento no disponible")
        raise ErrorInterno("Servicio de almacenamiento no disponible.")

    storage_key = build_storage_key(filename)

    try:
        storage.put_object(
            settings.MINIO_BUCKET,
            storage_key,
            io.BytesIO(content),
            length=size,
            content_type=MIME_PDF,
        )
    except Exception:
        logger.exception("Error subiendo archivo %s a MinIO", storage_key)
        raise ErrorInterno("Error guardando el archivo en el servidor.")

    logger.info("Archivo %s subido (%d bytes)", storage_key, size)
    return {
        "location": build_location(storage_key),
        "fileName": storage_key,
    }
