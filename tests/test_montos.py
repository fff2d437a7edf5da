from decimal import Decimal

import pytest

from dashboard.services.montos import (
    ModoImporte,
    formato_ars,
    parse_importe,
    variacion_porcentual,
)


@pytest.mark.parametrize(
    "raw, esperado",
    [
        ("$ 12.345,67", 12345.67),
        ("1,234.56", 1234.56),
        ("$ 500", 500.0),
        ("12,5", 12.5),
        ("1.234", 1.234),
        ("-1.234,50", -1234.5),
        (Decimal("10.50"), 10.5),
        (7, 7.0),
    ],
)
def test_parse_locale(raw, esperado):
    assert parse_importe(raw) == pytest.approx(esperado)


@pytest.mark.parametrize("raw", [None, "", "abc", "$", float("nan"), "nan", "--"])
def test_parse_invalido_vale_cero(raw):
    assert parse_importe(raw) == 0.0
    assert parse_importe(raw, ModoImporte.SIMPLE) == 0.0


def test_parse_simple_ignora_comas():
    assert parse_importe("1.234,56", ModoImporte.SIMPLE) == pytest.approx(1.23456)
    assert parse_importe("$ 12.345", ModoImporte.SIMPLE) == pytest.approx(12.345)
    assert parse_importe("$ 500", ModoImporte.SIMPLE) == 500.0


def test_formato_ars():
    assert formato_ars(1234.5) == "$ 1.234,50"
    assert formato_ars(0) == "$ 0,00"
    assert formato_ars(None) == "$ 0,00"
    assert formato_ars(-50000) == "-$ 50.000,00"
    assert formato_ars(1234567, decimales=0) == "$ 1.234.567"


def test_variacion_porcentual():
    assert variacion_porcentual(110, 100).etiqueta == "+10%"
    baja = variacion_porcentual(90, 100)
    assert baja.etiqueta == "-10%"
    assert not baja.positiva
    assert variacion_porcentual(5, 0).etiqueta == "+0%"


@pytest.mark.parametrize("valor", [0.5, 12.3, 1234.56, 987654.32])
def test_formato_ars_vuelve_con_parse(valor):
    assert parse_importe(formato_ars(valor)) == pytest.approx(valor)
