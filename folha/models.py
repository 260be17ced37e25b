# folha/models.py
#
# Moldes dos registros que entram no motor. O store é schemaless e grava as
# chaves em português (salario, cargo_id, mes_referencia...), então cada campo
# aceita tanto o nome do atributo quanto a chave do store. Valores numéricos
# passam uma única vez por safe_decimal: nada chega aos cálculos como NaN.

import json
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

from folha.shared.errors import Issue
from folha.shared.utils import ZERO, arredondar, parse_data, safe_decimal, safe_int


def _texto(value: Any) -> Optional[str]:
    if value is None:
        return None
    texto = str(value).strip()
    return texto or None


def _booleano(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "sim", "s")
    return bool(value)


def _json_dict(value: Any) -> Any:
    # Registros antigos gravavam o detalhamento como texto JSON.
    if value is None or value == "":
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return value


def _avos_editados(value: Any) -> Optional[Any]:
    # Mantém o valor fora da faixa para a validação acusar; só limpa vazios.
    if value is None or value == "":
        return None
    return value


Dinheiro = Annotated[Decimal, BeforeValidator(safe_decimal)]
Inteiro = Annotated[int, BeforeValidator(safe_int)]
Data = Annotated[Optional[date], BeforeValidator(parse_data)]
Texto = Annotated[Optional[str], BeforeValidator(_texto)]


def _campo(default: Any, *nomes: str, **kwargs: Any) -> Any:
    # Lê qualquer um dos nomes; grava com a chave do store (a última).
    return Field(
        default,
        validation_alias=AliasChoices(*nomes),
        serialization_alias=nomes[-1],
        **kwargs,
    )


class RegistroBase(BaseModel):
    model_config = ConfigDict(extra="ignore")


# --- ENUMS DO DOMÍNIO (valores exatamente como gravados no store) ---


class RegraDescontoFalta(str, Enum):
    DIA_CHEIO = "dia_cheio"
    HORAS = "horas"


class TipoComissao(str, Enum):
    INDIVIDUAL = "individual"
    EMPRESA = "empresa"


class BaseCalculoComissao(str, Enum):
    TOTAL = "total"
    EXCEDENTE = "excedente"


class StatusAdiantamento(str, Enum):
    PAGO = "pago"
    APROVADO = "aprovado"
    PENDENTE = "pendente"
    REJEITADO = "rejeitado"


STATUS_ADIANTAMENTO_VALIDOS = (StatusAdiantamento.PAGO, StatusAdiantamento.APROVADO)
STATUS_OS_FINALIZADA = "finalizado"


class TipoParcela(str, Enum):
    PRIMEIRA = "1_parcela"
    SEGUNDA = "2_parcela"
    UNICA = "parcela_unica"


class StatusFolha13(str, Enum):
    GERADO = "gerado"
    EDITADO = "editado"


def _regra_falta(value: Any) -> RegraDescontoFalta:
    if isinstance(value, RegraDescontoFalta):
        return value
    # Qualquer valor diferente de "dia_cheio" desconta por horas + dias.
    if str(value or "").strip() == RegraDescontoFalta.DIA_CHEIO.value:
        return RegraDescontoFalta.DIA_CHEIO
    return RegraDescontoFalta.HORAS


def _enum_ou_padrao(enum_cls, padrao):
    def _converter(value: Any):
        if isinstance(value, enum_cls):
            return value
        try:
            return enum_cls(str(value).strip())
        except ValueError:
            return padrao

    return _converter


# --- CADASTROS ---


class Employee(RegistroBase):
    id: Texto = None
    name: Texto = _campo(None, "name", "nome")
    full_salary: Dinheiro = _campo(ZERO, "full_salary", "salario")
    role_id: Texto = _campo(None, "role_id", "cargo_id")
    hire_date: Data = _campo(None, "hire_date", "data_inicio")
    termination_date: Data = _campo(None, "termination_date", "data_demissao")
    status: Texto = None
    weekday_overtime_factor: Dinheiro = _campo(
        Decimal("1.5"), "weekday_overtime_factor", "fator_hora_extra_semana"
    )
    weekend_overtime_factor: Dinheiro = _campo(
        Decimal("2"), "weekend_overtime_factor", "fator_hora_extra_fds"
    )
    absence_deduction_rule: Annotated[
        RegraDescontoFalta, BeforeValidator(_regra_falta)
    ] = _campo(RegraDescontoFalta.HORAS, "absence_deduction_rule", "regra_desconto_falta")
    irrf_dependents: Inteiro = _campo(0, "irrf_dependents", "dependentes_irrf")


class Role(RegistroBase):
    id: Texto = None
    name: Texto = _campo(None, "name", "nome")
    commission_enabled: Annotated[bool, BeforeValidator(_booleano)] = _campo(
        False, "commission_enabled", "tem_comissao"
    )
    commission_type: Annotated[
        TipoComissao,
        BeforeValidator(_enum_ou_padrao(TipoComissao, TipoComissao.INDIVIDUAL)),
    ] = _campo(TipoComissao.INDIVIDUAL, "commission_type", "tipo_comissao")
    commission_percent: Dinheiro = _campo(ZERO, "commission_percent", "percentual_comissao")
    minimum_threshold_individual: Dinheiro = _campo(
        ZERO, "minimum_threshold_individual", "meta_minima_individual"
    )
    minimum_threshold_company: Dinheiro = _campo(
        ZERO, "minimum_threshold_company", "meta_minima_empresa"
    )
    commission_base: Annotated[
        BaseCalculoComissao,
        BeforeValidator(_enum_ou_padrao(BaseCalculoComissao, BaseCalculoComissao.TOTAL)),
    ] = _campo(BaseCalculoComissao.TOTAL, "commission_base", "base_calculo_comissao")

    def normalized(self) -> "Role":
        """Cargo pronto para gravar: sem comissão, os campos de comissão zeram."""
        if not self.commission_enabled:
            return self.model_copy(
                update={
                    "commission_type": TipoComissao.INDIVIDUAL,
                    "commission_percent": ZERO,
                    "minimum_threshold_individual": ZERO,
                    "minimum_threshold_company": ZERO,
                    "commission_base": BaseCalculoComissao.TOTAL,
                }
            )
        if self.commission_type == TipoComissao.INDIVIDUAL:
            return self.model_copy(update={"minimum_threshold_company": ZERO})
        return self.model_copy(update={"minimum_threshold_individual": ZERO})


# --- MOVIMENTOS ---


class AttendanceRecord(RegistroBase):
    id: Texto = None
    employee_id: Texto = _campo(None, "employee_id", "funcionario_id")
    reference_month: Texto = _campo(None, "reference_month", "mes_referencia")
    weekday_overtime_hours: Dinheiro = _campo(
        ZERO, "weekday_overtime_hours", "horas_extras_semana"
    )
    weekend_overtime_hours: Dinheiro = _campo(
        ZERO, "weekend_overtime_hours", "horas_extras_fds"
    )
    absence_days: Dinheiro = _campo(ZERO, "absence_days", "faltas_dias")
    absence_hours: Dinheiro = _campo(ZERO, "absence_hours", "faltas_horas")


class LeaveRecord(RegistroBase):
    id: Texto = None
    employee_id: Texto = _campo(None, "employee_id", "funcionario_id")
    start_date: Data = _campo(None, "start_date", "data_inicio")
    end_date: Data = _campo(None, "end_date", "data_fim")
    reason: Texto = _campo(None, "reason", "motivo")


class SalesOrder(RegistroBase):
    id: Texto = None
    completion_date: Data = _campo(None, "completion_date", "data_conclusao")
    status: Texto = None
    seller_id: Texto = _campo(None, "seller_id", "vendedor_id")
    total_value: Dinheiro = _campo(ZERO, "total_value", "valor_total")


class AdvanceRecord(RegistroBase):
    id: Texto = None
    employee_id: Texto = _campo(None, "employee_id", "funcionario_id")
    competence: Texto = _campo(None, "competence", "competencia")
    amount: Dinheiro = _campo(ZERO, "amount", "valor")
    status: Annotated[
        StatusAdiantamento,
        BeforeValidator(_enum_ou_padrao(StatusAdiantamento, StatusAdiantamento.PENDENTE)),
    ] = StatusAdiantamento.PENDENTE

    @property
    def is_deductible(self) -> bool:
        return self.status in STATUS_ADIANTAMENTO_VALIDOS


# --- RESULTADOS PERSISTIDOS ---


class MonthlyPayroll(RegistroBase):
    id: Texto = None
    employee_id: Texto = _campo(None, "employee_id", "funcionario_id")
    competence: Texto = _campo(None, "competence", "competencia")
    worked_days: Inteiro = _campo(0, "worked_days", "dias_trabalhados")
    period_start_date: Data = _campo(None, "period_start_date", "data_inicio_competencia")

    # Entradas
    base_salary: Dinheiro = _campo(ZERO, "base_salary", "salario_base")
    commissions: Dinheiro = _campo(ZERO, "commissions", "comissoes")
    overtime_value: Dinheiro = _campo(ZERO, "overtime_value", "horas_extras")
    bonus: Dinheiro = ZERO
    other_credits: Dinheiro = _campo(ZERO, "other_credits", "outras_entradas")

    # Saídas
    advances: Dinheiro = _campo(ZERO, "advances", "adiantamentos")
    absence_deduction: Dinheiro = _campo(ZERO, "absence_deduction", "faltas")
    employer_charges: Dinheiro = _campo(ZERO, "employer_charges", "encargos")
    other_debits: Dinheiro = _campo(ZERO, "other_debits", "outras_saidas")

    total_entries: Dinheiro = _campo(ZERO, "total_entries", "total_entradas")
    total_deductions: Dinheiro = _campo(ZERO, "total_deductions", "total_saidas")
    net_salary: Dinheiro = _campo(ZERO, "net_salary", "salario_liquido")
    payment_status: Texto = _campo("pendente", "payment_status", "status_pagamento")
    # Erros de faixa bloqueiam a gravação
    errors: List[Issue] = Field(default_factory=list)
    warnings: List[Issue] = Field(default_factory=list)

    def entries(self) -> Decimal:
        return arredondar(
            self.base_salary
            + self.commissions
            + self.overtime_value
            + self.bonus
            + self.other_credits
        )

    def deductions(self) -> Decimal:
        return arredondar(
            self.advances
            + self.absence_deduction
            + self.employer_charges
            + self.other_debits
        )


class AnnualBonusRecord(RegistroBase):
    id: Texto = None
    employee_id: Texto = _campo(None, "employee_id", "funcionario_id")
    reference_year: Optional[int] = _campo(None, "reference_year", "ano_referencia")
    installment_type: Optional[TipoParcela] = _campo(
        None, "installment_type", "tipo_parcela"
    )

    # Avos
    accrued_twelfths: Inteiro = _campo(0, "accrued_twelfths", "avos_calculados")
    edited_twelfths: Annotated[Optional[int], BeforeValidator(_avos_editados)] = _campo(
        None, "edited_twelfths", "avos_editados"
    )
    twelfths_lost_to_absence: Inteiro = _campo(
        0, "twelfths_lost_to_absence", "avos_descontados_faltas"
    )
    twelfths_lost_to_leave: Inteiro = _campo(
        0, "twelfths_lost_to_leave", "avos_descontados_afastamento"
    )
    monthly_details: Annotated[Dict[str, Any], BeforeValidator(_json_dict)] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("monthly_details", "meses_trabalhados_detalhes"),
        serialization_alias="meses_trabalhados_detalhes",
    )

    # Salário e médias
    base_salary: Dinheiro = _campo(ZERO, "base_salary", "salario_base")
    average_overtime: Dinheiro = _campo(ZERO, "average_overtime", "media_horas_extras")
    average_commissions: Dinheiro = _campo(ZERO, "average_commissions", "media_comissoes")
    average_other: Dinheiro = _campo(ZERO, "average_other", "media_outros")
    average_window_months: Inteiro = _campo(
        0, "average_window_months", "meses_considerados_media"
    )

    # Valores
    gross_value: Dinheiro = _campo(ZERO, "gross_value", "valor_bruto")
    first_installment_value: Dinheiro = _campo(
        ZERO, "first_installment_value", "valor_primeira_parcela"
    )

    # INSS
    inss_base: Dinheiro = _campo(ZERO, "inss_base", "base_calculo_inss")
    inss_value: Dinheiro = _campo(ZERO, "inss_value", "inss")
    inss_bracket: str = _campo("N/A", "inss_bracket", "inss_faixa")

    # IRRF
    irrf_base: Dinheiro = _campo(ZERO, "irrf_base", "base_calculo_irrf")
    irrf_dependents: Inteiro = _campo(0, "irrf_dependents", "dependentes_irrf")
    irrf_dependent_deduction: Dinheiro = _campo(
        ZERO, "irrf_dependent_deduction", "deducao_dependentes"
    )
    irrf_value: Dinheiro = _campo(ZERO, "irrf_value", "irrf")
    irrf_bracket: str = _campo("N/A", "irrf_bracket", "irrf_faixa")

    other_deductions: Dinheiro = _campo(ZERO, "other_deductions", "outros_descontos")
    other_deductions_description: Texto = _campo(
        None, "other_deductions_description", "outros_descontos_descricao"
    )

    net_before_floor: Dinheiro = _campo(ZERO, "net_before_floor", "valor_liquido_apurado")
    net_value: Dinheiro = _campo(ZERO, "net_value", "valor_liquido")
    status: StatusFolha13 = StatusFolha13.GERADO
    payment_date: Data = _campo(None, "payment_date", "data_pagamento")
    table_version: Texto = _campo(None, "table_version", "tabela_vigente")
    warnings: List[Issue] = Field(default_factory=list)

    @property
    def effective_twelfths(self) -> int:
        if self.edited_twelfths is not None:
            return self.edited_twelfths
        return self.accrued_twelfths

    @property
    def averages_total(self) -> Decimal:
        return self.average_overtime + self.average_commissions + self.average_other
