import logging

from minio import Minio
# Se importa para manejar la conexión SSL
import urllib3

from app.core.config import settings

logger = logging.getLogger("gabinete.archivos")


def get_minio_client():
    try:
        # Servidor con certificado autofirmado: no se verifica SSL
        http_client = urllib3.PoolManager(
            timeout=urllib3.Timeout.DEFAULT_TIMEOUT,
            cert_reqs='CERT_NONE',
            retries=urllib3.Retry(
                total=5,
                backoff_factor=0.2,
                status_forcelist=[500, 502, 503, 504]
            )
        )

        client = Minio(
            endpoint=settings.MINIO_ENDPOINT,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_SECURE,
            http_client=http_client,
            region="us-east-1"
        )
        return client
    except Exception:
        logger.exception("Error fatal iniciando cliente MinIO")
        return None

# Instancia única
minio_client = get_minio_client()


def get_storage_client():
    """Dependencia FastAPI (sobrescribible en tests)."""
    return minio_client
