import os

# La app crea su engine al importar: en tests nunca apunta a PostgreSQL
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.config import settings
from app.core.db import Base, get_db
from app.core.minio import get_storage_client

CLAVE_ENTREGA = "clave-entrega-test"
CLAVE_ELIMINAR = "clave-eliminar-test"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture(autouse=True)
def claves(monkeypatch):
    """Claves de proceso conocidas para los tests."""
    monkeypatch.setattr(settings, "CONFIRM_CASE_TOKEN", CLAVE_ENTREGA)
    monkeypatch.setattr(settings, "DELETE_CASE_TOKEN", CLAVE_ELIMINAR)


@pytest.fixture
def fake_storage():
    """
    Simula el cliente MinIO: solo registra las llamadas a put_object.
    """
    class FakeStorage:
        def __init__(self):
            self.objetos = []

        def put_object(self, bucket, key, data, length, content_type=None):
            self.objetos.append(
                {
                    "bucket": bucket,
                    "key": key,
                    "data": data.read(),
                    "length": length,
                    "content_type": content_type,
                }
            )

    return FakeStorage()


@pytest.fixture
def client(session_factory, fake_storage):
    """
    Cliente con rol superadmin. El usuario (X-Usuario) se envía por petición.
    """
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_client] = lambda: fake_storage

    with TestClient(app, headers={"X-Rol": "superadmin"}) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def caso_payload():
    return {
        "tipo_obra": "Vialidad",
        "nombre_obra": "Asfaltado calle 5",
        "parroquia": "Caricuao",
        "circuito": "Circuito 3",
        "eje": "Eje Oeste",
        "comuna": "Comuna Ruiz Pineda",
        "codigo_comuna": "COM-001",
        "name_jc": "Juan Pérez",
        "name_ju": "María Gómez",
        "enlace_comunal": "Pedro Díaz",
        "case_description": "Bacheo y asfaltado de 300 metros.",
        "case_date": "2024-05-01",
        "consejo_comunal_ejecuta": "CC Las Flores",
    }


@pytest.fixture
def crear_caso(client, caso_payload):
    """Crea un caso vía API y devuelve el JSON del caso."""
    def _crear(**overrides):
        data = {**caso_payload, **overrides}
        resp = client.post("/casos", json=data, headers={"X-Usuario": "ana"})
        assert resp.status_code == 201, resp.text
        return resp.json()["caso"]

    return _crear


@pytest.fixture
def caso_factory(db_session):
    """Inserta un caso directamente en BD (tests de servicios)."""
    from datetime import date

    from app.models.caso import Caso

    def _crear(**overrides):
        data = {
            "tipo_obra": "Vialidad",
            "parroquia": "Caricuao",
            "circuito": "Circuito 3",
            "eje": "Eje Oeste",
            "comuna": "Comuna Ruiz Pineda",
            "codigo_comuna": "COM-001",
            "name_jc": "Juan Pérez",
            "name_ju": "María Gómez",
            "enlace_comunal": "Pedro Díaz",
            "case_description": "Bacheo.",
            "case_date": date(2024, 5, 1),
            "estado": "CARGADO",
        }
        data.update(overrides)
        caso = Caso(**data)
        db_session.add(caso)
        db_session.commit()
        db_session.refresh(caso)
        return caso

    return _crear
