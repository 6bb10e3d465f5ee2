def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").status_code == 200


# =====================================================
# Crear / obtener
# =====================================================

def test_crear_caso_con_defaults(crear_caso):
    caso = crear_caso()

    assert caso["estado"] == "CARGADO"
    assert caso["codigo_personalizado"] == f"CUB-{caso['id']:05d}"
    assert caso["archivo"] == ""
    assert caso["ente_responsable"] == "N/A"
    assert caso["cantidad_familiares"] == 0
    assert caso["fecha_entrega"] is None
    assert caso["actuaciones"] == []
    assert caso["modificaciones"] == []


def test_crear_caso_con_estado_inicial(crear_caso):
    caso = crear_caso(estado="En Desarrollo")
    assert caso["estado"] == "EN_DESARROLLO"


def test_crear_caso_entregado_no_permitido(client, caso_payload):
    resp = client.post("/casos", json={**caso_payload, "estado": "Entregado"})
    assert resp.status_code == 400


def test_crear_caso_faltan_campos(client, caso_payload):
    data = dict(caso_payload)
    del data["parroquia"]
    resp = client.post("/casos", json=data)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Error de validación en los datos enviados."


def test_codigo_personalizado_duplicado(client, crear_caso, caso_payload):
    crear_caso(codigo_personalizado="OBRA-1")
    resp = client.post("/casos", json={**caso_payload, "codigo_personalizado": "OBRA-1"})
    assert resp.status_code == 409


def test_codigo_con_prefijo_generado_rechazado(client, crear_caso, caso_payload):
    resp = client.post("/casos", json={**caso_payload, "codigo_personalizado": "CUB-00002"})
    assert resp.status_code == 400
    assert client.post(
        "/casos", json={**caso_payload, "codigo_personalizado": "cub-7"}
    ).status_code == 400

    # los códigos generados siguen libres
    primero = crear_caso()
    segundo = crear_caso()
    assert segundo["codigo_personalizado"] == f"CUB-{segundo['id']:05d}"
    assert primero["codigo_personalizado"] != segundo["codigo_personalizado"]


def test_codigo_personalizado_con_prefijo_no_reservado(crear_caso):
    assert crear_caso(codigo_personalizado="CUB-OBRA-1")["codigo_personalizado"] == "CUB-OBRA-1"


def test_crear_caso_campo_requerido_en_blanco(client, caso_payload):
    resp = client.post("/casos", json={**caso_payload, "eje": "   "})
    assert resp.status_code == 400


def test_crear_caso_recorta_espacios(crear_caso):
    assert crear_caso(eje="  Eje Sur  ")["eje"] == "Eje Sur"


def test_case_date_iso_se_guarda_como_dia(crear_caso):
    caso = crear_caso(case_date="2024-05-01T23:30:00Z")
    assert caso["case_date"] == "2024-05-01"


def test_case_date_invalida(client, caso_payload):
    resp = client.post("/casos", json={**caso_payload, "case_date": "ayer"})
    assert resp.status_code == 400
    resp = client.post("/casos", json={**caso_payload, "case_date": "2024-05-01xyz"})
    assert resp.status_code == 400


def test_obtener_caso(client, crear_caso):
    caso = crear_caso()
    resp = client.get(f"/casos/{caso['id']}")
    assert resp.status_code == 200
    assert resp.json()["id"] == caso["id"]


def test_obtener_caso_inexistente(client):
    resp = client.get("/casos/999")
    assert resp.status_code == 404
    assert "no encontrado" in resp.json()["detail"]


def test_id_no_numerico(client):
    assert client.get("/casos/abc").status_code == 400


# =====================================================
# Listado
# =====================================================

def test_listado_paginado_mas_reciente_primero(client, crear_caso):
    ids = [crear_caso()["id"] for _ in range(3)]

    resp = client.get("/casos", params={"page": 1, "limit": 2})
    body = resp.json()

    assert resp.status_code == 200
    assert body["totalCount"] == 3
    assert body["totalPages"] == 2
    assert body["currentPage"] == 1
    assert [c["id"] for c in body["casos"]] == [ids[2], ids[1]]

    body = client.get("/casos", params={"page": 2, "limit": 2}).json()
    assert [c["id"] for c in body["casos"]] == [ids[0]]


def test_listado_vacio(client):
    body = client.get("/casos").json()
    assert body == {"casos": [], "currentPage": 1, "totalPages": 0, "totalCount": 0}


def test_listado_filtra_por_estado(client, crear_caso):
    crear_caso()
    objetivo = crear_caso(estado="INACTIVO")

    body = client.get("/casos", params={"estado": "inactivo"}).json()
    assert [c["id"] for c in body["casos"]] == [objetivo["id"]]


def test_listado_no_incluye_historial(client, crear_caso):
    crear_caso()
    item = client.get("/casos").json()["casos"][0]
    assert "actuaciones" not in item
    assert "modificaciones" not in item


# =====================================================
# Edición general (PATCH)
# =====================================================

def test_patch_registra_modificaciones(client, crear_caso):
    caso = crear_caso()

    resp = client.patch(
        f"/casos/{caso['id']}",
        json={"tipo_obra": "Electricidad", "eje": caso["eje"], "usuario": "luis"},
    )
    assert resp.status_code == 200
    actualizado = resp.json()["caso"]

    assert actualizado["tipo_obra"] == "Electricidad"
    mods = actualizado["modificaciones"]
    assert len(mods) == 1
    assert mods[0]["campo"] == "tipo_obra"
    assert mods[0]["valor_antiguo"] == "Vialidad"
    assert mods[0]["valor_nuevo"] == "Electricidad"
    assert mods[0]["usuario"] == "luis"


def test_patch_usuario_desde_header(client, crear_caso):
    caso = crear_caso()
    resp = client.patch(
        f"/casos/{caso['id']}", json={"eje": "Eje Sur"}, headers={"X-Usuario": "carla"}
    )
    assert resp.json()["caso"]["modificaciones"][-1]["usuario"] == "carla"


def test_patch_sin_cambios_registra_revision(client, crear_caso):
    caso = crear_caso()

    resp = client.patch(f"/casos/{caso['id']}", json={"tipo_obra": "  Vialidad  "})
    mods = resp.json()["caso"]["modificaciones"]

    assert [(m["campo"], m["valor_antiguo"], m["valor_nuevo"]) for m in mods] == [
        ("review", "N/A", "N/A")
    ]
    assert mods[0]["usuario"] == "Sistema"


def test_patch_campos_no_editables(client, crear_caso):
    caso = crear_caso()
    for data in ({"estado": "INACTIVO"}, {"fecha_entrega": "2024-01-01"}, {"id": 7}):
        resp = client.patch(f"/casos/{caso['id']}", json=data)
        assert resp.status_code == 400, data


def test_patch_campo_nulo(client, crear_caso):
    caso = crear_caso()
    resp = client.patch(f"/casos/{caso['id']}", json={"parroquia": None})
    assert resp.status_code == 400


def test_patch_campo_requerido_en_blanco(client, crear_caso):
    caso = crear_caso()

    resp = client.patch(f"/casos/{caso['id']}", json={"eje": "   "})

    assert resp.status_code == 400
    despues = client.get(f"/casos/{caso['id']}").json()
    assert despues["eje"] == caso["eje"]
    assert despues["modificaciones"] == []


def test_patch_caso_inexistente(client):
    assert client.patch("/casos/999", json={"eje": "Eje Sur"}).status_code == 404


def test_patch_archivo_subido(client, crear_caso):
    caso = crear_caso()
    ref = "http://minio/gabinete-casos/casos_pdfs/archivo-1.pdf"

    resp = client.patch(f"/casos/{caso['id']}", json={"archivo": ref})

    assert resp.json()["caso"]["archivo"] == ref
    assert resp.json()["caso"]["modificaciones"][-1]["campo"] == "archivo"


# =====================================================
# Estado
# =====================================================

def test_patch_estado(client, crear_caso):
    caso = crear_caso()

    resp = client.patch(
        f"/casos/{caso['id']}/estado", json={"estado": "Supervisado", "usuario": "ana"}
    )

    assert resp.status_code == 200
    body = resp.json()["caso"]
    assert body["estado"] == "SUPERVISADO"
    assert body["modificaciones"][-1]["campo"] == "estado"
    assert body["version"] > caso["version"]


def test_patch_estado_entregado_rechazado(client, crear_caso):
    caso = crear_caso()
    resp = client.patch(f"/casos/{caso['id']}/estado", json={"estado": "ENTREGADO"})
    assert resp.status_code == 400


def test_patch_estado_invalido_caso_inexistente(client):
    # el estado se valida antes que la existencia del caso
    assert client.patch("/casos/999/estado", json={"estado": "Archivado"}).status_code == 400
    assert client.patch("/casos/999/estado", json={"estado": "INACTIVO"}).status_code == 404


# =====================================================
# Actuaciones
# =====================================================

def test_agregar_y_listar_actuaciones(client, crear_caso):
    caso = crear_caso()

    resp = client.post(
        f"/casos/{caso['id']}/actuaciones",
        json={"descripcion": "Visita técnica realizada"},
        headers={"X-Usuario": "ana"},
    )
    assert resp.status_code == 201

    acts = client.get(f"/casos/{caso['id']}/actuaciones").json()
    assert [(a["descripcion"], a["usuario"]) for a in acts] == [
        ("Visita técnica realizada", "ana")
    ]


def test_actuacion_vacia(client, crear_caso):
    caso = crear_caso()
    resp = client.post(f"/casos/{caso['id']}/actuaciones", json={"descripcion": "   "})
    assert resp.status_code == 400


def test_listar_modificaciones(client, crear_caso):
    caso = crear_caso()
    client.patch(f"/casos/{caso['id']}", json={"eje": "Eje Sur"})
    client.patch(f"/casos/{caso['id']}/estado", json={"estado": "INACTIVO"})

    mods = client.get(f"/casos/{caso['id']}/modificaciones").json()
    assert [m["campo"] for m in mods] == ["eje", "estado"]


def test_historial_de_caso_inexistente(client):
    assert client.get("/casos/999/actuaciones").status_code == 404
    assert client.get("/casos/999/modificaciones").status_code == 404


# =====================================================
# Roles
# =====================================================

def test_rol_user_solo_lectura(client, crear_caso):
    caso = crear_caso()
    user = {"X-Rol": "user"}

    assert client.get(f"/casos/{caso['id']}", headers=user).status_code == 200
    assert client.patch(f"/casos/{caso['id']}", json={"eje": "X"}, headers=user).status_code == 403
    assert client.patch(
        f"/casos/{caso['id']}/estado", json={"estado": "INACTIVO"}, headers=user
    ).status_code == 403
    assert client.post(
        f"/casos/{caso['id']}/actuaciones", json={"descripcion": "x"}, headers=user
    ).status_code == 403


def test_rol_desconocido_se_trata_como_user(client, caso_payload):
    resp = client.post("/casos", json=caso_payload, headers={"X-Rol": "root"})
    assert resp.status_code == 403


def test_admin_puede_editar(client, crear_caso):
    caso = crear_caso()
    resp = client.patch(
        f"/casos/{caso['id']}", json={"eje": "Eje Sur"}, headers={"X-Rol": "Admin"}
    )
    assert resp.status_code == 200
