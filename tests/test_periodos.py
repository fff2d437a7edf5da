from datetime import date, time, timedelta

import pytest

from dashboard.services.periodos import (
    Granularidad,
    etiqueta_actual,
    etiqueta_anterior,
    opciones_dia,
    resolver_periodo,
)
from tests.utils import aware

AHORA = aware(2025, 3, 10, 15, 30)


def fechas(rango):
    return rango.fecha_inicio, rango.fecha_fin


def test_dia_con_anio_cubre_el_dia_completo():
    rango = resolver_periodo("dia", "05/03/2025", ahora=AHORA)
    assert rango.start == aware(2025, 3, 5)
    assert rango.end.time() == time.max
    assert fechas(rango) == (date(2025, 3, 5), date(2025, 3, 5))


def test_dia_futuro_sin_anio_va_al_anio_anterior():
    rango = resolver_periodo("dia", "20/12", ahora=AHORA)
    assert fechas(rango) == (date(2024, 12, 20), date(2024, 12, 20))


def test_dia_de_hoy_sin_anio_no_es_futuro():
    rango = resolver_periodo("dia", "10/03", ahora=AHORA)
    assert rango.fecha_inicio == date(2025, 3, 10)


@pytest.mark.parametrize(
    "etiqueta, esperado",
    [
        ("Sem 10 2025", (date(2025, 3, 3), date(2025, 3, 9))),
        ("Sem 1 2025", (date(2024, 12, 30), date(2025, 1, 5))),
        ("Sem 53 2020", (date(2020, 12, 28), date(2021, 1, 3))),
        ("sem 05", (date(2025, 1, 27), date(2025, 2, 2))),
    ],
)
def test_semana_iso(etiqueta, esperado):
    assert fechas(resolver_periodo(Granularidad.SEMANA, etiqueta, ahora=AHORA)) == esperado


def test_semana_53_inexistente_cae_en_hoy(caplog):
    rango = resolver_periodo("semana", "Sem 53 2021", ahora=AHORA)
    assert fechas(rango) == (date(2025, 3, 10), date(2025, 3, 10))
    assert "inválida" in caplog.text


@pytest.mark.parametrize(
    "etiqueta, esperado",
    [
        ("Feb 2024", (date(2024, 2, 1), date(2024, 2, 29))),
        ("feb 2025", (date(2025, 2, 1), date(2025, 2, 28))),
        ("Dic 2025", (date(2025, 12, 1), date(2025, 12, 31))),
        ("Ene. 2026", (date(2026, 1, 1), date(2026, 1, 31))),
    ],
)
def test_mes_abreviado(etiqueta, esperado):
    assert fechas(resolver_periodo("mes", etiqueta, ahora=AHORA)) == esperado


def test_anio_completo():
    rango = resolver_periodo("year", "2024", ahora=AHORA)
    assert fechas(rango) == (date(2024, 1, 1), date(2024, 12, 31))
    assert len(rango.dias()) == 366


@pytest.mark.parametrize(
    "granularidad, etiqueta",
    [("mes", "Foo 2025"), ("dia", "hola"), ("ano", "25"), ("semana", "Semana diez"), ("dia", "31/02/2025")],
)
def test_etiqueta_invalida_resuelve_a_hoy(granularidad, etiqueta):
    rango = resolver_periodo(granularidad, etiqueta, ahora=AHORA)
    assert fechas(rango) == (date(2025, 3, 10), date(2025, 3, 10))


def test_granularidad_desconocida_resuelve_a_hoy():
    rango = resolver_periodo("trimestre", "Q1 2025", ahora=AHORA)
    assert rango.fecha_inicio == date(2025, 3, 10)


def test_granularidad_alias_en_ingles():
    assert Granularidad.parse("week") is Granularidad.SEMANA
    assert Granularidad.parse("MONTH") is Granularidad.MES
    with pytest.raises(ValueError):
        Granularidad.parse("trimestre")


def test_dias_de_una_semana():
    dias = resolver_periodo("semana", "Sem 10 2025", ahora=AHORA).dias()
    assert len(dias) == 7
    assert dias[0].weekday() == 0
    assert dias[-1] == date(2025, 3, 9)


def test_etiquetas_actuales():
    hoy = date(2025, 3, 5)
    assert etiqueta_actual("dia", hoy) == "05/03/2025"
    assert etiqueta_actual("semana", hoy) == "Sem 10 2025"
    assert etiqueta_actual("mes", hoy) == "Mar 2025"
    assert etiqueta_actual("ano", hoy) == "2025"


def test_etiqueta_actual_se_resuelve_a_un_periodo_que_contiene_hoy():
    hoy = AHORA.date()
    for g in Granularidad:
        assert resolver_periodo(g, etiqueta_actual(g, hoy), ahora=AHORA).contiene(hoy)


def test_opciones_dia_ultimos_30():
    opciones = opciones_dia(date(2025, 3, 5))
    assert len(opciones) == 30
    assert opciones[0] == "05/03"
    assert opciones[-1] == "04/02"


@pytest.mark.parametrize(
    "granularidad, hoy, esperado",
    [
        ("dia", date(2025, 3, 5), "04/03/2025"),
        ("dia", date(2025, 1, 1), "31/12/2024"),
        ("semana", date(2025, 3, 5), "Sem 09 2025"),
        ("semana", date(2026, 1, 1), "Sem 52 2025"),
        ("semana", date(2021, 1, 5), "Sem 53 2020"),
        ("mes", date(2025, 3, 5), "Feb 2025"),
        ("mes", date(2025, 1, 15), "Dic 2024"),
        ("ano", date(2025, 3, 5), "2024"),
    ],
)
def test_etiqueta_anterior(granularidad, hoy, esperado):
    assert etiqueta_anterior(granularidad, hoy) == esperado


@pytest.mark.parametrize("hoy", [date(2025, 3, 10), date(2026, 1, 1), date(2025, 1, 1)])
def test_periodo_anterior_termina_justo_antes_del_actual(hoy):
    ahora = aware(hoy.year, hoy.month, hoy.day, 12)
    for g in Granularidad:
        actual = resolver_periodo(g, etiqueta_actual(g, hoy), ahora=ahora)
        anterior = resolver_periodo(g, etiqueta_anterior(g, hoy), ahora=ahora)
        assert anterior.fecha_fin + timedelta(days=1) == actual.fecha_inicio
