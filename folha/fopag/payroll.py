# folha/fopag/payroll.py

"""
Montagem da folha mensal de um funcionário.

Entradas: salário (integral ou proporcional), comissões, horas extras, bônus e
outras entradas. Saídas: adiantamentos, faltas, encargos e outras saídas.
O líquido é sempre entradas - saídas e NUNCA é travado em zero: líquido
negativo aparece na folha com aviso (diferente do 13º, que trava em zero).
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from pydantic import Field

from folha.config import Settings, settings
from folha.fopag.commission import (
    calc_commission_detail,
    orders_in_competence,
    validate_role,
)
from folha.fopag.proportional import (
    calc_proportional_salary,
    days_in_month,
    worked_days_from_start,
)
from folha.logging_config import log
from folha.models import (
    AdvanceRecord,
    AttendanceRecord,
    Data,
    Dinheiro,
    Employee,
    Inteiro,
    MonthlyPayroll,
    RegistroBase,
    RegraDescontoFalta,
    Role,
    SalesOrder,
)
from folha.shared.errors import InputError, Issue, policy_warning
from folha.shared.utils import ZERO, arredondar, parse_competencia, safe_decimal


class PayrollInputs(RegistroBase):
    """Fotografia dos dados de apoio já buscados no store para uma competência."""

    role: Optional[Role] = None
    attendance: Optional[AttendanceRecord] = None
    orders: List[SalesOrder] = Field(default_factory=list)
    advances: List[AdvanceRecord] = Field(default_factory=list)
    period_start_date: Data = None
    worked_days: Inteiro = 0
    bonus: Dinheiro = ZERO
    other_credits: Dinheiro = ZERO
    other_debits: Dinheiro = ZERO
    # None = segue COMISSAO_APENAS_OS_FINALIZADAS
    require_finalized_only: Optional[bool] = None
    warnings: List[Issue] = Field(default_factory=list)


def merge_attendance(
    records: Iterable[AttendanceRecord], employee_id: str, competencia: str
) -> Tuple[Optional[AttendanceRecord], List[Issue]]:
    """
    Um registro de ponto por (funcionário, mês). Havendo mais de um, os
    registros são somados e a duplicidade vira aviso.
    """
    do_mes = [
        r
        for r in records
        if r.employee_id == employee_id and r.reference_month == competencia
    ]
    if not do_mes:
        return None, []
    if len(do_mes) == 1:
        return do_mes[0], []

    log.warning(
        f"{len(do_mes)} registros de ponto para {employee_id} em {competencia}. Somando."
    )
    somado = AttendanceRecord(
        employee_id=employee_id,
        reference_month=competencia,
        weekday_overtime_hours=sum((r.weekday_overtime_hours for r in do_mes), ZERO),
        weekend_overtime_hours=sum((r.weekend_overtime_hours for r in do_mes), ZERO),
        absence_days=sum((r.absence_days for r in do_mes), ZERO),
        absence_hours=sum((r.absence_hours for r in do_mes), ZERO),
    )
    aviso = policy_warning(
        f"{len(do_mes)} registros de ponto em {competencia}: horas e faltas foram somadas"
    )
    return somado, [aviso]


def _dias_trabalhados(
    employee: Employee, competencia: str, inputs: PayrollInputs
) -> Tuple[int, Optional[date]]:
    # Data de início informada tem prioridade; depois dias digitados; por fim a admissão.
    if inputs.period_start_date is not None:
        dias = worked_days_from_start(inputs.period_start_date, competencia)
        return dias, inputs.period_start_date if dias else None
    if inputs.worked_days > 0:
        return inputs.worked_days, None
    dias = worked_days_from_start(employee.hire_date, competencia)
    return dias, employee.hire_date if dias else None


def calc_overtime(
    employee: Employee, attendance: Optional[AttendanceRecord], valor_hora: Decimal
) -> Decimal:
    if attendance is None:
        return ZERO
    return arredondar(
        attendance.weekday_overtime_hours * valor_hora * employee.weekday_overtime_factor
        + attendance.weekend_overtime_hours * valor_hora * employee.weekend_overtime_factor
    )


def calc_absence_deduction(
    employee: Employee,
    attendance: Optional[AttendanceRecord],
    valor_hora: Decimal,
    divisor_dias: Decimal,
) -> Decimal:
    if attendance is None or divisor_dias <= 0:
        return ZERO
    valor_dia = employee.full_salary / divisor_dias
    if employee.absence_deduction_rule == RegraDescontoFalta.DIA_CHEIO:
        return arredondar(valor_dia * attendance.absence_days)
    return arredondar(
        valor_hora * attendance.absence_hours + valor_dia * attendance.absence_days
    )


def sum_advances(
    advances: Iterable[AdvanceRecord], employee_id: str, competencia: str
) -> Decimal:
    """Só adiantamentos pagos ou aprovados do funcionário na competência são descontados."""
    return arredondar(
        sum(
            (
                a.amount
                for a in advances
                if a.is_deductible
                and a.competence == competencia
                and a.employee_id == employee_id
            ),
            ZERO,
        )
    )


def recalc_totals(folha: MonthlyPayroll) -> MonthlyPayroll:
    """Recalcula totais e líquido a partir dos campos gravados."""
    entradas = folha.entries()
    saidas = folha.deductions()
    return folha.model_copy(
        update={
            "total_entries": entradas,
            "total_deductions": saidas,
            "net_salary": arredondar(entradas - saidas),
        }
    )


def build_payroll(
    employee: Optional[Employee],
    competencia: Optional[str],
    inputs: Optional[PayrollInputs] = None,
    config: Optional[Settings] = None,
) -> MonthlyPayroll:
    if employee is None or not employee.id:
        raise InputError("Funcionário não informado")
    parse_competencia(competencia)

    config = config or settings
    inputs = inputs or PayrollInputs()
    avisos: List[Issue] = list(inputs.warnings)
    salario = employee.full_salary

    # --- 1. SALÁRIO BASE (integral ou proporcional) ---
    dias, inicio = _dias_trabalhados(employee, competencia, inputs)
    dias_no_mes = days_in_month(competencia)
    if dias > dias_no_mes:
        avisos.append(
            policy_warning(
                f"Dias trabalhados ({dias}) acima dos dias do mês ({dias_no_mes}); usando {dias_no_mes}"
            )
        )
        dias = dias_no_mes
    salario_base = calc_proportional_salary(salario, competencia, dias)

    # --- 2. HORAS EXTRAS E FALTAS (sempre sobre o salário integral) ---
    horas_mes = safe_decimal(config.HORAS_MES)
    valor_hora = salario / horas_mes if horas_mes > 0 else ZERO
    horas_extras = calc_overtime(employee, inputs.attendance, valor_hora)
    faltas = calc_absence_deduction(
        employee, inputs.attendance, valor_hora, safe_decimal(config.DIVISOR_DIAS_FALTA)
    )

    # --- 3. ENCARGOS ESTIMADOS ---
    encargos = arredondar(salario * safe_decimal(config.PERCENTUAL_ENCARGOS))

    # --- 4. ADIANTAMENTOS ---
    adiantamentos = sum_advances(inputs.advances, employee.id, competencia)

    # --- 5. COMISSÕES ---
    erros = validate_role(inputs.role)
    apenas_finalizadas = (
        config.COMISSAO_APENAS_OS_FINALIZADAS
        if inputs.require_finalized_only is None
        else inputs.require_finalized_only
    )
    comissao = calc_commission_detail(
        inputs.role,
        orders_in_competence(inputs.orders, competencia),
        employee.id,
        apenas_finalizadas,
    )
    if comissao.applicable and not comissao.threshold_met:
        avisos.append(
            policy_warning(
                f"Meta mínima de comissão não atingida: vendas R$ {comissao.sales_base:.2f} "
                f"< meta R$ {comissao.threshold:.2f}"
            )
        )

    folha = recalc_totals(
        MonthlyPayroll(
            employee_id=employee.id,
            competence=competencia,
            worked_days=dias,
            period_start_date=inicio,
            base_salary=salario_base,
            commissions=comissao.value,
            overtime_value=horas_extras,
            bonus=arredondar(inputs.bonus),
            other_credits=arredondar(inputs.other_credits),
            advances=adiantamentos,
            absence_deduction=faltas,
            employer_charges=encargos,
            other_debits=arredondar(inputs.other_debits),
        )
    )

    if folha.net_salary < 0:
        avisos.append(
            policy_warning(f"Salário líquido negativo: R$ {folha.net_salary:.2f}")
        )

    if erros:
        log.warning(
            f"Folha {competencia} de {employee.id} com erros: "
            f"{'; '.join(str(e) for e in erros)}"
        )
    log.info(
        f"Folha {competencia} de {employee.id}: entradas R$ {folha.total_entries}, "
        f"saídas R$ {folha.total_deductions}, líquido R$ {folha.net_salary}"
    )
    return folha.model_copy(update={"errors": erros, "warnings": avisos})
