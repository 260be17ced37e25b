# folha/folha13/calculator.py

"""
Cálculo do 13º salário (Folha 13) de um funcionário.

Fluxo:
1. Avos do ano (ou avos editados, 0 a 12).
2. Médias das verbas variáveis nas folhas da janela.
3. Bruto = (salário + médias) / 12 x avos.
4. Por parcela:
   - 1ª parcela: metade do bruto, sem INSS/IRRF.
   - 2ª parcela: INSS e IRRF sobre o bruto CHEIO, menos a metade já paga.
   - Parcela única: bruto menos INSS, IRRF e outros descontos.
5. Líquido negativo é travado em zero, com aviso.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional, Tuple

from folha.config import Settings, settings
from folha.fopag.calculations import NAO_APLICAVEL, calc_inss, calc_irrf
from folha.fopag.tax_tables import INSS, IRRF, get_table
from folha.folha13.avos import calc_avos
from folha.folha13.medias import calc_medias
from folha.logging_config import log
from folha.models import (
    AnnualBonusRecord,
    AttendanceRecord,
    Employee,
    LeaveRecord,
    MonthlyPayroll,
    StatusFolha13,
    TipoParcela,
)
from folha.shared.errors import (
    InputError,
    Issue,
    config_fallback,
    policy_warning,
    range_error,
)
from folha.shared.utils import ZERO, arredondar, safe_int

AVOS_MAXIMOS = 12


@dataclass
class Folha13Result:
    record: Optional[AnnualBonusRecord]
    errors: List[Issue] = field(default_factory=list)
    warnings: List[Issue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.record is not None and not self.errors


def parse_edited_twelfths(value: Any) -> Tuple[Optional[int], Optional[Issue]]:
    """Avos editados precisam ser inteiros de 0 a 12. Nunca são ajustados."""
    if value is None or value == "":
        return None, None
    if isinstance(value, bool):
        return None, range_error(f"Avos editados inválidos: {value!r}")
    try:
        numero = Decimal(str(value).strip())
    except InvalidOperation:
        return None, range_error(f"Avos editados inválidos: {value!r}")
    if not numero.is_finite() or numero != numero.to_integral_value():
        return None, range_error(f"Avos editados devem ser inteiros: {value!r}")
    avos = int(numero)
    if not 0 <= avos <= AVOS_MAXIMOS:
        return None, range_error(f"Avos devem estar entre 0 e 12 (informado: {avos})")
    return avos, None


def parse_installment(value: Any) -> Optional[TipoParcela]:
    if isinstance(value, TipoParcela):
        return value
    try:
        return TipoParcela(str(value).strip())
    except ValueError:
        return None


def mark_edited(record: AnnualBonusRecord) -> AnnualBonusRecord:
    """Folha com avos sobrescritos ou descontos manuais passa a 'editado'."""
    if record.edited_twelfths is not None or record.other_deductions > 0:
        return record.model_copy(update={"status": StatusFolha13.EDITADO})
    return record


def calc_folha13(
    employee: Optional[Employee],
    year: Any,
    installment: Any,
    *,
    attendance: Iterable[AttendanceRecord] = (),
    leaves: Iterable[LeaveRecord] = (),
    payrolls: Iterable[MonthlyPayroll] = (),
    edited_twelfths: Any = None,
    other_deductions: Any = 0,
    other_deductions_description: Optional[str] = None,
    table_version: Optional[str] = None,
    reference_month: int = 12,
    payment_date: Optional[date] = None,
    config: Optional[Settings] = None,
) -> Folha13Result:
    if employee is None or not employee.id:
        raise InputError("Funcionário não informado")
    ano = safe_int(year)
    if ano <= 0:
        raise InputError("Ano de referência não informado")

    config = config or settings

    parcela = parse_installment(installment)
    if parcela is None:
        return Folha13Result(
            record=None, errors=[range_error(f"Tipo de parcela inválido: {installment!r}")]
        )

    # Validação dos avos editados ANTES de qualquer valor monetário.
    avos_editados, erro_avos = parse_edited_twelfths(edited_twelfths)
    if erro_avos is not None:
        log.warning(f"[13º] {employee.id} {ano}: {erro_avos}")
        return Folha13Result(record=None, errors=[erro_avos])

    avisos: List[Issue] = []
    if employee.full_salary <= 0:
        avisos.append(policy_warning("Salário não cadastrado ou zerado"))

    # --- 1. AVOS ---
    avos = calc_avos(
        employee, ano, attendance, leaves, dias_minimos=config.DIAS_MINIMOS_AVO
    )
    avisos.extend(avos.warnings)
    if avos_editados == avos.accrued:
        avos_editados = None
    avos_finais = avos.accrued if avos_editados is None else avos_editados

    # --- 2. TABELAS ---
    versao = str(table_version or config.TABELA_VIGENTE)
    tabela_inss = get_table(INSS, versao)
    tabela_irrf = get_table(IRRF, versao)
    for busca in (tabela_inss, tabela_irrf):
        if busca.fallback_used:
            avisos.append(
                config_fallback(
                    f"Tabela {busca.table.kind.upper()} {versao} indisponível; "
                    f"usada a versão {busca.table.version}"
                )
            )

    other = arredondar(other_deductions)
    registro = AnnualBonusRecord(
        employee_id=employee.id,
        reference_year=ano,
        installment_type=parcela,
        accrued_twelfths=avos.accrued,
        edited_twelfths=avos_editados,
        twelfths_lost_to_absence=avos.lost_to_absence,
        twelfths_lost_to_leave=avos.lost_to_leave,
        monthly_details=avos.details,
        irrf_dependents=employee.irrf_dependents,
        other_deductions=other,
        other_deductions_description=other_deductions_description,
        table_version=tabela_inss.table.version,
        payment_date=payment_date,
    )

    if avos_finais == 0:
        avisos.append(policy_warning("Nenhum avo apurado: 13º zerado"))
        registro = registro.model_copy(update={"warnings": avisos})
        return Folha13Result(record=registro, warnings=avisos)

    # --- 3. MÉDIAS E BRUTO ---
    medias = calc_medias(
        payrolls, employee.id, ano, avos_finais, reference_month, config
    )
    avisos.extend(medias.warnings)
    salario = arredondar(employee.full_salary)
    base_total = salario + medias.total
    bruto = arredondar(base_total / AVOS_MAXIMOS * avos_finais)
    metade = arredondar(bruto / 2)

    # --- 4. PARCELA ---
    inss = irrf = NAO_APLICAVEL
    if parcela == TipoParcela.PRIMEIRA:
        liquido_apurado = metade
    else:
        inss = calc_inss(bruto, tabela_inss.table)
        irrf = calc_irrf(bruto - inss.value, tabela_irrf.table, employee.irrf_dependents)
        ja_pago = metade if parcela == TipoParcela.SEGUNDA else ZERO
        liquido_apurado = arredondar(bruto - ja_pago - inss.value - irrf.value - other)

    if liquido_apurado < 0:
        avisos.append(
            policy_warning(
                f"Valor líquido negativo (R$ {liquido_apurado:.2f}) ajustado para zero: verificar descontos"
            )
        )

    registro = registro.model_copy(
        update={
            "base_salary": salario,
            "average_overtime": medias.average_overtime,
            "average_commissions": medias.average_commissions,
            "average_other": medias.average_other,
            "average_window_months": medias.divisor,
            "gross_value": bruto,
            "first_installment_value": metade,
            "inss_base": bruto if inss is not NAO_APLICAVEL else ZERO,
            "inss_value": inss.value,
            "inss_bracket": inss.bracket_label,
            "irrf_base": irrf.base_used,
            "irrf_dependent_deduction": irrf.dependent_deduction,
            "irrf_value": irrf.value,
            "irrf_bracket": irrf.bracket_label,
            "net_before_floor": liquido_apurado,
            "net_value": max(ZERO, liquido_apurado),
            "warnings": avisos,
        }
    )

    log.info(
        f"[13º] {employee.id} {ano} {parcela.value}: {avos_finais} avos, "
        f"bruto R$ {bruto}, INSS R$ {inss.value}, IRRF R$ {irrf.value}, "
        f"líquido R$ {registro.net_value}"
    )
    return Folha13Result(record=registro, warnings=avisos)
