# folha/fopag/proportional.py

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from folha.shared.utils import (
    arredondar,
    get_total_dias_mes,
    parse_competencia,
    parse_data,
    safe_decimal,
    safe_int,
)


def days_in_month(competencia: str) -> int:
    """Dias reais do mês da competência (28-31)."""
    ano, mes = parse_competencia(competencia)
    return get_total_dias_mes(ano, mes)


def calc_proportional_salary(full_salary: Any, competencia: str, worked_days: Any = None) -> Decimal:
    """
    Salário proporcional aos dias trabalhados no mês.

    Dias trabalhados zerados ou ausentes significam mês integral: o salário
    cheio é devolvido sem rateio.
    """
    salario = safe_decimal(full_salary)
    dias = safe_int(worked_days)
    if dias <= 0:
        return arredondar(salario)
    dias_no_mes = days_in_month(competencia)
    return arredondar(salario / dias_no_mes * dias)


def worked_days_from_start(period_start_date: Optional[Any], competencia: str) -> int:
    """
    Dias trabalhados a partir da data de início (admissão no meio do mês).

    Retorna 0 quando a data está fora da competência: nesse caso o rateio não
    se aplica e o mês é integral.
    """
    inicio: Optional[date] = parse_data(period_start_date)
    if inicio is None:
        return 0
    ano, mes = parse_competencia(competencia)
    if inicio.year != ano or inicio.month != mes:
        return 0
    return get_total_dias_mes(ano, mes) - inicio.day + 1
