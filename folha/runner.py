# folha/runner.py

"""
Orquestração: busca no store -> cálculo -> validação -> gravação opcional.

As funções de lote ("gerar folha em lote") devolvem um DataFrame com o resumo
de todos os funcionários, um por linha, no formato usado pelos relatórios.
"""

from datetime import date
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from folha.config import Settings
from folha.fopag.payroll import PayrollInputs, build_payroll, merge_attendance
from folha.folha13.calculator import Folha13Result, calc_folha13, mark_edited
from folha.folha13.validation import validate_folha13
from folha.logging_config import log
from folha.models import (
    AdvanceRecord,
    AttendanceRecord,
    Employee,
    LeaveRecord,
    MonthlyPayroll,
    RegistroBase,
    Role,
    SalesOrder,
)
from folha.shared.errors import FolhaError, InputError, Issue, NotFoundError
from folha.shared.utils import parse_competencia
from folha.store import (
    ADIANTAMENTOS,
    AFASTAMENTOS,
    CARGOS,
    CONTROLE_PONTO,
    FOLHAS_13,
    FOLHAS_PAGAMENTO,
    FUNCIONARIOS,
    ORDENS_SERVICO,
    DataStore,
)

STATUS_FORA_DA_FOLHA = ("demitido", "inativo")


# --- LEITURA ---


def carregar_funcionario(store: DataStore, employee_id: Optional[str]) -> Employee:
    if not employee_id:
        raise InputError("Funcionário não informado")
    registro = store.get(FUNCIONARIOS, employee_id)
    if registro is None:
        raise NotFoundError(f"Funcionário '{employee_id}' não encontrado")
    return Employee.model_validate(registro)


def carregar_cargo(store: DataStore, role_id: Optional[str]) -> Optional[Role]:
    if not role_id:
        return None
    registro = store.get(CARGOS, role_id)
    if registro is None:
        log.warning(f"Cargo '{role_id}' não encontrado. Folha sem comissão.")
        return None
    return Role.model_validate(registro)


def coletar_entradas_folha(
    store: DataStore, employee: Employee, competencia: str, **extras: Any
) -> PayrollInputs:
    """Monta o snapshot de dados de apoio da competência para build_payroll."""
    ponto, avisos = merge_attendance(
        [
            AttendanceRecord.model_validate(r)
            for r in store.filter(
                CONTROLE_PONTO, funcionario_id=employee.id, mes_referencia=competencia
            )
        ],
        employee.id,
        competencia,
    )
    return PayrollInputs(
        role=carregar_cargo(store, employee.role_id),
        attendance=ponto,
        orders=[SalesOrder.model_validate(r) for r in store.list(ORDENS_SERVICO)],
        advances=[
            AdvanceRecord.model_validate(r)
            for r in store.filter(
                ADIANTAMENTOS, funcionario_id=employee.id, competencia=competencia
            )
        ],
        warnings=avisos,
        **extras,
    )


# --- GRAVAÇÃO ---


def _para_store(modelo: RegistroBase) -> Dict[str, Any]:
    return modelo.model_dump(mode="json", by_alias=True, exclude={"id"})


def _upsert(
    store: DataStore, collection: str, chave: Dict[str, Any], dados: Dict[str, Any]
) -> Dict[str, Any]:
    existentes = store.filter(collection, **chave)
    if existentes:
        return store.update(collection, existentes[0]["id"], dados)
    return store.create(collection, dados)


# --- EXECUÇÃO INDIVIDUAL ---


def run_folha_mensal(
    store: DataStore,
    employee_id: Optional[str],
    competencia: Optional[str],
    *,
    persist: bool = False,
    config: Optional[Settings] = None,
    **extras: Any,
) -> MonthlyPayroll:
    """
    Calcula a folha do funcionário na competência. `extras` repassa os campos
    digitados na tela (bonus, other_credits, other_debits, period_start_date,
    worked_days, require_finalized_only).
    """
    funcionario = carregar_funcionario(store, employee_id)
    if not competencia:
        raise InputError("Competência não informada")

    entradas = coletar_entradas_folha(store, funcionario, competencia, **extras)
    folha = build_payroll(funcionario, competencia, entradas, config)

    if folha.errors:
        log.warning(
            f"Folha {competencia} de {funcionario.id} bloqueada: "
            f"{'; '.join(str(e) for e in folha.errors)}"
        )
        return folha

    if persist:
        gravado = _upsert(
            store,
            FOLHAS_PAGAMENTO,
            {"funcionario_id": funcionario.id, "competencia": competencia},
            _para_store(folha),
        )
        folha = folha.model_copy(update={"id": gravado["id"]})
        log.success(f"Folha {competencia} de {funcionario.name or funcionario.id} gravada.")
    return folha


def _dedup(issues: List[Issue]) -> List[Issue]:
    vistos = set()
    unicos = []
    for issue in issues:
        if issue not in vistos:
            vistos.add(issue)
            unicos.append(issue)
    return unicos


def run_folha13(
    store: DataStore,
    employee_id: Optional[str],
    year: Any,
    installment: Any,
    *,
    edited_twelfths: Any = None,
    other_deductions: Any = 0,
    other_deductions_description: Optional[str] = None,
    table_version: Optional[str] = None,
    payment_date: Optional[date] = None,
    persist: bool = False,
    config: Optional[Settings] = None,
) -> Folha13Result:
    """Calcula, valida e (se pedido e sem erros) grava a Folha 13."""
    funcionario = carregar_funcionario(store, employee_id)
    cargo = carregar_cargo(store, funcionario.role_id)

    resultado = calc_folha13(
        funcionario,
        year,
        installment,
        attendance=[
            AttendanceRecord.model_validate(r)
            for r in store.filter(CONTROLE_PONTO, funcionario_id=funcionario.id)
        ],
        leaves=[
            LeaveRecord.model_validate(r)
            for r in store.filter(AFASTAMENTOS, funcionario_id=funcionario.id)
        ],
        payrolls=[
            MonthlyPayroll.model_validate(r)
            for r in store.filter(FOLHAS_PAGAMENTO, funcionario_id=funcionario.id)
        ],
        edited_twelfths=edited_twelfths,
        other_deductions=other_deductions,
        other_deductions_description=other_deductions_description,
        table_version=table_version,
        payment_date=payment_date,
        config=config,
    )
    if resultado.record is None:
        return resultado

    registro = mark_edited(resultado.record)
    validacao = validate_folha13(registro, funcionario, role=cargo)
    erros = resultado.errors + validacao.errors
    avisos = _dedup(resultado.warnings + validacao.warnings)
    registro = registro.model_copy(update={"warnings": avisos})

    if erros:
        log.warning(
            f"Folha 13 de {funcionario.id} bloqueada: {'; '.join(str(e) for e in erros)}"
        )
        return Folha13Result(record=registro, errors=erros, warnings=avisos)

    if persist:
        gravado = _upsert(
            store,
            FOLHAS_13,
            {
                "funcionario_id": registro.employee_id,
                "ano_referencia": registro.reference_year,
                "tipo_parcela": registro.installment_type.value,
            },
            _para_store(registro),
        )
        registro = registro.model_copy(update={"id": gravado["id"]})
        log.success(
            f"Folha 13 {registro.reference_year} ({registro.installment_type.value}) "
            f"de {funcionario.name or funcionario.id} gravada."
        )
    return Folha13Result(record=registro, errors=erros, warnings=avisos)


# --- LOTES ---


def _funcionarios(store: DataStore, apenas_ativos: bool) -> List[Employee]:
    funcionarios = [Employee.model_validate(r) for r in store.list(FUNCIONARIOS)]
    if apenas_ativos:
        funcionarios = [
            f for f in funcionarios if (f.status or "").lower() not in STATUS_FORA_DA_FOLHA
        ]
    return funcionarios


def _avisos_texto(issues: List[Issue]) -> str:
    return " | ".join(str(i) for i in issues)


def gerar_folha_lote(
    store: DataStore,
    competencia: str,
    *,
    persist: bool = False,
    config: Optional[Settings] = None,
) -> pd.DataFrame:
    parse_competencia(competencia)
    log.info(f"--- INICIANDO FOLHA EM LOTE {competencia} ---")
    linhas = []
    for funcionario in _funcionarios(store, apenas_ativos=True):
        linha = {"FuncionarioId": funcionario.id, "Nome": funcionario.name or ""}
        try:
            folha = run_folha_mensal(
                store, funcionario.id, competencia, persist=persist, config=config
            )
        except FolhaError as e:
            log.error(f"Erro na folha de {funcionario.id}: {e}")
            linha.update({"Status": "Erro", "Erros": str(e)})
            linhas.append(linha)
            continue
        linha.update(
            {
                "Competencia": competencia,
                "DiasTrabalhados": folha.worked_days,
                "SalarioBase": float(folha.base_salary),
                "Comissoes": float(folha.commissions),
                "HorasExtras": float(folha.overtime_value),
                "TotalEntradas": float(folha.total_entries),
                "TotalSaidas": float(folha.total_deductions),
                "SalarioLiquido": float(folha.net_salary),
                "Status": "Bloqueado" if folha.errors else "OK",
                "Avisos": _avisos_texto(folha.warnings),
                "Erros": _avisos_texto(folha.errors),
            }
        )
        linhas.append(linha)

    colunas = [
        "FuncionarioId",
        "Nome",
        "Competencia",
        "DiasTrabalhados",
        "SalarioBase",
        "Comissoes",
        "HorasExtras",
        "TotalEntradas",
        "TotalSaidas",
        "SalarioLiquido",
        "Status",
        "Avisos",
        "Erros",
    ]
    df = _resumo(linhas, colunas)
    log.info(f"--- FIM: {len(df)} folha(s) processada(s) ---")
    return df


def gerar_folha13_lote(
    store: DataStore,
    year: Any,
    installment: Any,
    *,
    persist: bool = False,
    table_version: Optional[str] = None,
    config: Optional[Settings] = None,
) -> pd.DataFrame:
    log.info(f"--- INICIANDO 13º EM LOTE {year} ({installment}) ---")
    linhas = []
    # Desligados no ano também recebem o 13º proporcional.
    for funcionario in _funcionarios(store, apenas_ativos=False):
        linha = {"FuncionarioId": funcionario.id, "Nome": funcionario.name or ""}
        try:
            resultado = run_folha13(
                store,
                funcionario.id,
                year,
                installment,
                table_version=table_version,
                persist=persist,
                config=config,
            )
        except FolhaError as e:
            log.error(f"Erro no 13º de {funcionario.id}: {e}")
            linha.update({"Status": "Erro", "Erros": str(e)})
            linhas.append(linha)
            continue

        registro = resultado.record
        if registro is not None:
            linha.update(
                {
                    "Ano": registro.reference_year,
                    "Parcela": registro.installment_type.value,
                    "Avos": registro.effective_twelfths,
                    "ValorBruto": float(registro.gross_value),
                    "INSS": float(registro.inss_value),
                    "IRRF": float(registro.irrf_value),
                    "ValorLiquido": float(registro.net_value),
                }
            )
        linha.update(
            {
                "Status": "Bloqueado" if resultado.errors else "OK",
                "Avisos": _avisos_texto(resultado.warnings),
                "Erros": _avisos_texto(resultado.errors),
            }
        )
        linhas.append(linha)

    colunas = [
        "FuncionarioId",
        "Nome",
        "Ano",
        "Parcela",
        "Avos",
        "ValorBruto",
        "INSS",
        "IRRF",
        "ValorLiquido",
        "Status",
        "Avisos",
        "Erros",
    ]
    df = _resumo(linhas, colunas)
    log.info(f"--- FIM: {len(df)} registro(s) de 13º processado(s) ---")
    return df


def _resumo(linhas: List[Dict[str, Any]], colunas: List[str]) -> pd.DataFrame:
    df = pd.DataFrame(linhas, columns=colunas)
    if df.empty:
        return df
    cols_texto = ["Nome", "Status", "Avisos"] + (["Erros"] if "Erros" in colunas else [])
    df[cols_texto] = df[cols_texto].fillna("")
    return df.sort_values(by="Nome").reset_index(drop=True)


def resumo_para_registros(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame de lote -> lista de dicts serializável (NaN vira None)."""
    return df.astype(object).replace({np.nan: None}).to_dict(orient="records")
