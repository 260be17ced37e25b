# folha/folha13/validation.py

"""
Regras de validação da Folha 13 antes de gravar.

Erros bloqueiam a gravação; avisos são exibidos mas permitem salvar.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from folha.fopag.commission import validate_role
from folha.fopag.tax_tables import INSS, IRRF, TableLookup, has_version
from folha.models import AnnualBonusRecord, Employee, Role, TipoParcela
from folha.shared.errors import Issue, config_fallback, policy_warning, range_error

ANO_MINIMO = 2000
STATUS_DEMITIDO = "demitido"


@dataclass
class ValidationResult:
    valid: bool
    errors: List[Issue] = field(default_factory=list)
    warnings: List[Issue] = field(default_factory=list)


def _avisos_tabela(
    record: AnnualBonusRecord, tables: Optional[Iterable[TableLookup]]
) -> List[Issue]:
    if tables is not None:
        return [
            config_fallback(
                f"Tabela {busca.table.kind.upper()} {busca.requested_version or '-'} "
                f"indisponível; usada a versão {busca.table.version}"
            )
            for busca in tables
            if busca.fallback_used
        ]
    if record.table_version is None:
        return []
    return [
        config_fallback(
            f"Tabela {kind.upper()} {record.table_version} não cadastrada"
        )
        for kind in (INSS, IRRF)
        if not has_version(kind, record.table_version)
    ]


def validate_folha13(
    record: AnnualBonusRecord,
    employee: Optional[Employee] = None,
    tables: Optional[Iterable[TableLookup]] = None,
    role: Optional[Role] = None,
) -> ValidationResult:
    erros: List[Issue] = []
    avisos: List[Issue] = []

    # --- Obrigatórios ---
    if not record.employee_id:
        erros.append(range_error("Funcionário não informado"))
    if not record.reference_year or record.reference_year < ANO_MINIMO:
        erros.append(range_error("Ano de referência inválido"))
    if record.installment_type is None:
        erros.append(range_error("Tipo de parcela não informado"))

    # --- Valores ---
    if record.gross_value < 0:
        erros.append(range_error("Valor bruto não pode ser negativo"))
    if record.net_before_floor < 0 or record.net_value < 0:
        avisos.append(policy_warning("Valor líquido está negativo - verificar descontos"))

    avos = record.effective_twelfths
    if not 0 <= avos <= 12:
        erros.append(range_error(f"Avos deve estar entre 0 e 12 (informado: {avos})"))
    if record.twelfths_lost_to_absence:
        avisos.append(
            policy_warning(f"{record.twelfths_lost_to_absence} avo(s) descontado(s) por faltas")
        )
    if record.twelfths_lost_to_leave:
        avisos.append(
            policy_warning(
                f"{record.twelfths_lost_to_leave} avo(s) descontado(s) por afastamento"
            )
        )

    erros.extend(validate_role(role))
    avisos.extend(_avisos_tabela(record, tables))

    # --- Prazos de pagamento ---
    if record.payment_date is not None and (record.reference_year or 0) >= ANO_MINIMO:
        ano = record.reference_year
        if record.installment_type == TipoParcela.PRIMEIRA and record.payment_date > date(
            ano, 11, 30
        ):
            avisos.append(policy_warning("1ª parcela deve ser paga até 30/Nov conforme CLT"))
        if record.installment_type == TipoParcela.SEGUNDA and record.payment_date > date(
            ano, 12, 20
        ):
            avisos.append(policy_warning("2ª parcela deve ser paga até 20/Dez conforme CLT"))

    # --- Cadastro do funcionário ---
    if employee is not None:
        if employee.status == STATUS_DEMITIDO and employee.termination_date is None:
            avisos.append(
                policy_warning("Funcionário demitido sem data de demissão cadastrada")
            )
        if employee.full_salary <= 0:
            avisos.append(policy_warning("Salário do funcionário não cadastrado"))

    return ValidationResult(valid=not erros, errors=erros, warnings=avisos)
