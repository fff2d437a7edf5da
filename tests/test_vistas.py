import pytest
from django.test import Client
from django.urls import reverse
from django.utils import timezone

from accounts.models import (
    Menu,
    RoleMenuPermission,
    RoleSubmenuPermission,
    Submenu,
    UserProfile,
    UserSubmenuPermission,
)
from accounts.sesion import SesionIdentidad, identidad_de
from dashboard.services.alcance import resolver_sede
from dashboard.services.periodos import etiqueta_actual, etiqueta_anterior
from multas.models import Multa
from tests.utils import aware


def test_resolver_sede_admin_elige():
    admin = SesionIdentidad(user_id=1, rol="admin", sede_id=4, token="t")
    assert resolver_sede(admin, "todas") is None
    assert resolver_sede(admin, None) is None
    assert resolver_sede(admin, "7") == 7
    assert resolver_sede(admin, "xx") is None


def test_resolver_sede_no_admin_queda_en_la_suya():
    operador = SesionIdentidad(user_id=2, rol="operador", sede_id=4, token="t")
    assert resolver_sede(operador, "7") == 4
    assert resolver_sede(operador, "todas") == 4
    assert resolver_sede(None, "7") is None


@pytest.mark.django_db
def test_identidad_de_superusuario_sin_perfil(admin_user):
    sesion = identidad_de(admin_user, "abc")
    assert sesion.es_admin
    assert sesion.sede_id is None


@pytest.mark.django_db
def test_kpis_requiere_login(client):
    resp = client.get(reverse("dashboard:kpis"))
    assert resp.status_code == 302


@pytest.mark.django_db
def test_kpis_como_admin(client, admin_user, estados):
    client.force_login(admin_user)
    resp = client.get(reverse("dashboard:kpis"))
    assert resp.status_code == 200
    data = resp.json()
    assert data["sede"] is None
    assert data["kpis"]["total_flota"]["value"] == 0
    assert data["kpis"]["ocupacion"]["value"] == "0%"


@pytest.mark.django_db
def test_operador_sin_menu_no_entra(client, operador):
    client.force_login(operador)
    assert client.get(reverse("dashboard:kpis")).status_code == 403


@pytest.mark.django_db
def test_operador_con_menu_queda_fijo_en_su_sede(client, operador, rol_operador, sede, otra_sede):
    menu = Menu.objects.create(name="dashboard")
    RoleMenuPermission.objects.create(rol=rol_operador, menu=menu, can_view=True)
    Multa.objects.create(fecha_infraccion=aware(2025, 3, 4), importe="$ 1.000,00", sede=sede)
    Multa.objects.create(fecha_infraccion=aware(2025, 3, 4), importe="$ 2.000,00", sede=otra_sede)

    client.force_login(operador)
    resp = client.get(
        reverse("dashboard:comparativa_indicador", args=["multas"]),
        {"granularidad": "semana", "periodo_a": "Sem 10 2025", "periodo_b": "Sem 09 2025", "sede": otra_sede.pk},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["sede"] == sede.pk
    multas = data["resultados"]["multas"]
    assert multas["total_a"] == 1000
    assert multas["total_b"] == 0
    assert multas["loading"] is False
    assert multas["total_a_fmt"] == "$ 1.000,00"
    assert multas["variacion"] == "+0%"


@pytest.mark.django_db
def test_comparativa_completa(client, admin_user):
    client.force_login(admin_user)
    resp = client.get(reverse("dashboard:comparativa"), {"granularidad": "mes", "periodo_a": "Mar 2025", "periodo_b": "Feb 2025"})
    assert resp.status_code == 200
    assert set(resp.json()["resultados"]) == {"multas", "telepase", "incidencias", "permanencia"}


@pytest.mark.django_db
def test_comparativa_por_defecto_es_actual_contra_anterior(client, admin_user):
    client.force_login(admin_user)
    data = client.get(reverse("dashboard:comparativa")).json()
    hoy = timezone.localdate()
    assert data["periodo_a"] == etiqueta_actual("semana", hoy)
    assert data["periodo_b"] == etiqueta_anterior("semana", hoy)
    assert data["periodo_a"] != data["periodo_b"]


@pytest.mark.django_db
def test_comparativa_granularidad_invalida(client, admin_user):
    client.force_login(admin_user)
    resp = client.get(reverse("dashboard:comparativa"), {"granularidad": "trimestre"})
    assert resp.status_code == 400


@pytest.mark.django_db
def test_comparativa_indicador_desconocido(client, admin_user):
    client.force_login(admin_user)
    assert client.get(reverse("dashboard:comparativa_indicador", args=["foo"])).status_code == 404


@pytest.mark.django_db
def test_cobro_teorico_por_dia_es_400(client, admin_user):
    client.force_login(admin_user)
    resp = client.get(reverse("dashboard:cobro_teorico"), {"granularidad": "dia"})
    assert resp.status_code == 400


@pytest.mark.django_db
def test_cobro_teorico_mes(client, admin_user):
    client.force_login(admin_user)
    resp = client.get(reverse("dashboard:cobro_teorico"), {"granularidad": "mes", "periodo": "Feb 2025"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["desde"] == "2025-02-01"
    assert [p["label"] for p in data["puntos"]] == ["Sem 05", "Sem 06", "Sem 07", "Sem 08", "Sem 09"]


@pytest.mark.django_db
def test_periodos(client, admin_user):
    client.force_login(admin_user)
    data = client.get(reverse("dashboard:periodos")).json()
    assert set(data["actual"]) == {"dia", "semana", "mes", "ano"}
    assert set(data["anterior"]) == set(data["actual"])
    assert len(data["dias"]) == 30


@pytest.mark.django_db
def test_login_nuevo_invalida_la_sesion_anterior(admin_user):
    vieja, nueva = Client(), Client()
    vieja.force_login(admin_user)
    assert vieja.get(reverse("dashboard:periodos")).status_code == 200

    nueva.force_login(admin_user)
    assert nueva.get(reverse("dashboard:periodos")).status_code == 200

    resp = vieja.get(reverse("dashboard:periodos"))
    assert resp.status_code == 302
    assert reverse("accounts:login") in resp["Location"]
    assert UserProfile.objects.get(user=admin_user).session_token


@pytest.mark.django_db
def test_mis_menus(client, operador, rol_operador):
    menu = Menu.objects.create(name="multas", label="Multas")
    Menu.objects.create(name="usuarios", label="Usuarios")
    RoleMenuPermission.objects.create(rol=rol_operador, menu=menu, can_view=True, can_create=True)
    client.force_login(operador)

    data = client.get(reverse("accounts:menus")).json()["results"]

    assert [m["name"] for m in data] == ["multas"]
    assert data[0]["can_create"] is True


@pytest.mark.django_db
def test_mis_menus_submenus_con_acciones_y_origen(client, operador, rol_operador):
    menu = Menu.objects.create(name="multas", label="Multas")
    RoleMenuPermission.objects.create(rol=rol_operador, menu=menu, can_view=True)
    alta = Submenu.objects.create(menu=menu, name="multas_alta", order_index=1)
    baja = Submenu.objects.create(menu=menu, name="multas_baja", order_index=2)
    pagos = Submenu.objects.create(menu=menu, name="multas_pagos", order_index=3)
    importar = Submenu.objects.create(menu=menu, name="multas_importar", order_index=4)
    RoleSubmenuPermission.objects.create(rol=rol_operador, submenu=alta, can_view=True, can_create=True)
    RoleSubmenuPermission.objects.create(rol=rol_operador, submenu=baja, can_view=True, can_delete=True)
    RoleSubmenuPermission.objects.create(rol=rol_operador, submenu=pagos, can_edit=True)
    # el override reemplaza las cuatro acciones del rol
    UserSubmenuPermission.objects.create(user=operador, submenu=baja, can_view=True)
    UserSubmenuPermission.objects.create(user=operador, submenu=importar, can_view=True, can_edit=True)
    client.force_login(operador)

    subs = client.get(reverse("accounts:menus")).json()["results"][0]["submenus"]

    assert [s["name"] for s in subs] == ["multas_alta", "multas_baja", "multas_importar"]
    acciones = {s["name"]: (s["can_view"], s["can_create"], s["can_edit"], s["can_delete"], s["origen"]) for s in subs}
    assert acciones["multas_alta"] == (True, True, False, False, "role_inherited")
    assert acciones["multas_baja"] == (True, False, False, False, "user_override")
    assert acciones["multas_importar"] == (True, False, True, False, "user_override")


@pytest.mark.django_db
def test_mis_menus_admin_ve_todos_los_submenus(client, admin_user):
    menu = Menu.objects.create(name="multas")
    Submenu.objects.create(menu=menu, name="multas_alta")
    client.force_login(admin_user)

    data = client.get(reverse("accounts:menus")).json()["results"]

    sub = data[0]["submenus"][0]
    assert data[0]["can_view"] is True
    assert (sub["can_view"], sub["can_create"], sub["can_edit"], sub["can_delete"]) == (True, True, True, True)
    assert sub["origen"] == "role_inherited"



@pytest.mark.django_db
def test_alternar_permiso_solo_admin(client, admin_user, operador):
    menu = Menu.objects.create(name="multas")
    payload = {"user_id": operador.pk, "tipo": "menu", "entidad_id": menu.pk, "accion": "view"}

    client.force_login(operador)
    assert client.post(reverse("accounts:alternar_permiso"), payload).status_code == 403

    client.force_login(admin_user)
    resp = client.post(reverse("accounts:alternar_permiso"), payload)
    assert resp.json() == {"ok": True, "accion": "view", "valor": True}
