# tests/test_proportional.py

from datetime import date
from decimal import Decimal

import pytest

from folha.fopag.proportional import (
    calc_proportional_salary,
    days_in_month,
    worked_days_from_start,
)
from folha.shared.errors import InputError


@pytest.mark.parametrize("mes", range(1, 13))
def test_mes_completo_paga_salario_integral(mes):
    competencia = f"2025-{mes:02d}"

    salario = calc_proportional_salary(3000, competencia, days_in_month(competencia))

    assert salario == Decimal("3000.00")


def test_dias_zerados_significa_mes_integral():
    assert calc_proportional_salary(3000, "2025-11", 0) == Decimal("3000.00")
    assert calc_proportional_salary(3000, "2025-11", None) == Decimal("3000.00")


def test_admissao_no_dia_20_de_mes_com_30_dias():
    # Arrange
    admissao = date(2025, 11, 20)
    # Act
    dias = worked_days_from_start(admissao, "2025-11")
    salario = calc_proportional_salary(3000, "2025-11", dias)
    # Assert
    assert dias == 11
    assert salario == Decimal("1100.00")


def test_data_de_inicio_fora_da_competencia_nao_rateia():
    assert worked_days_from_start("2025-10-20", "2025-11") == 0
    assert worked_days_from_start(None, "2025-11") == 0


def test_dias_no_mes_considera_ano_bissexto():
    assert days_in_month("2024-02") == 29
    assert days_in_month("2025-02") == 28


def test_competencia_invalida():
    with pytest.raises(InputError):
        calc_proportional_salary(3000, "novembro", 10)
