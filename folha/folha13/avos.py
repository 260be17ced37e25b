# folha/folha13/avos.py

"""
Apuração dos avos (1/12 por mês) do 13º salário.

Um mês conta quando o funcionário tem pelo menos DIAS_MINIMOS_AVO dias
efetivos nele: dias no período de contrato, menos faltas do ponto, menos dias
de afastamento que caem no mês.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from folha.fopag.payroll import merge_attendance
from folha.logging_config import log
from folha.models import AttendanceRecord, Employee, LeaveRecord
from folha.shared.errors import Issue, policy_warning
from folha.shared.utils import competencia_de, get_total_dias_mes


@dataclass
class AvosResult:
    accrued: int = 0
    lost_to_absence: int = 0
    lost_to_leave: int = 0
    warnings: List[Issue] = field(default_factory=list)
    # Chave = número do mês ("1".."12")
    details: Dict[str, Dict[str, Any]] = field(default_factory=dict)


def _dias_entre(inicio: date, fim: date) -> int:
    return (fim - inicio).days + 1


def _dias_afastamento(
    leaves: Iterable[LeaveRecord], primeiro_dia: date, ultimo_dia: date
) -> int:
    total = 0
    for afastamento in leaves:
        if afastamento.start_date is None:
            continue
        # Afastamento sem data de fim segue aberto até o fim do mês.
        fim = afastamento.end_date or ultimo_dia
        if afastamento.start_date > ultimo_dia or fim < primeiro_dia:
            continue
        total += _dias_entre(
            max(afastamento.start_date, primeiro_dia), min(fim, ultimo_dia)
        )
    return total


def calc_avos(
    employee: Employee,
    year: int,
    attendance: Iterable[AttendanceRecord] = (),
    leaves: Iterable[LeaveRecord] = (),
    dias_minimos: int = 15,
) -> AvosResult:
    resultado = AvosResult()
    ano = int(year)
    registros_ponto = list(attendance)
    afastamentos = [a for a in leaves if a.employee_id in (None, employee.id)]

    inicio_ano = date(ano, 1, 1)
    fim_ano = date(ano, 12, 31)
    admissao = employee.hire_date or inicio_ano
    if employee.hire_date is None:
        resultado.warnings.append(
            policy_warning("Data de admissão não cadastrada; considerando o ano inteiro")
        )

    if admissao > fim_ano:
        resultado.warnings.append(
            policy_warning("Funcionário não trabalhava no ano de referência")
        )
        return resultado

    fim_periodo = fim_ano
    if employee.termination_date is not None and employee.termination_date < fim_ano:
        fim_periodo = employee.termination_date
    if fim_periodo < inicio_ano:
        resultado.warnings.append(
            policy_warning("Funcionário desligado antes do ano de referência")
        )
        return resultado

    for mes in range(1, 13):
        primeiro_dia = date(ano, mes, 1)
        ultimo_dia = date(ano, mes, get_total_dias_mes(ano, mes))

        if primeiro_dia > fim_periodo or ultimo_dia < admissao:
            resultado.details[str(mes)] = {
                "trabalhado": False,
                "motivo": "Fora do período de trabalho",
                "dias_efetivos": 0,
                "avo": False,
            }
            continue

        dias_contrato = _dias_entre(max(admissao, primeiro_dia), min(fim_periodo, ultimo_dia))

        ponto, avisos_ponto = merge_attendance(
            registros_ponto, employee.id, competencia_de(ano, mes)
        )
        resultado.warnings.extend(avisos_ponto)
        faltas = ponto.absence_days if ponto is not None else Decimal("0")
        dias_afastado = _dias_afastamento(afastamentos, primeiro_dia, ultimo_dia)

        dias_efetivos = dias_contrato - faltas - dias_afastado
        tem_avo = dias_efetivos >= dias_minimos

        resultado.details[str(mes)] = {
            "trabalhado": True,
            "dias_no_mes": ultimo_dia.day,
            "dias_periodo": dias_contrato,
            "faltas_dias": float(faltas),
            "dias_afastamento": dias_afastado,
            "dias_efetivos": float(max(Decimal("0"), dias_efetivos)),
            "avo": tem_avo,
        }

        if tem_avo:
            resultado.accrued += 1
            continue

        # Mês de contrato curto (admissão/desligamento) não é perda: só não gera avo.
        if dias_contrato < dias_minimos or (faltas <= 0 and dias_afastado <= 0):
            continue
        if faltas >= dias_afastado:
            resultado.lost_to_absence += 1
            motivo = f"{faltas:.0f} faltas"
        else:
            resultado.lost_to_leave += 1
            motivo = f"{dias_afastado} dias de afastamento"
        resultado.warnings.append(policy_warning(f"Mês {mes}: perdeu avo por {motivo}"))

    log.debug(
        f"[Avos] {employee.id} {ano}: {resultado.accrued} avos "
        f"(faltas -{resultado.lost_to_absence}, afastamento -{resultado.lost_to_leave})"
    )
    return resultado
