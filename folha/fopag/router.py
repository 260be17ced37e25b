# folha/fopag/router.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from folha import runner
from folha.fopag import tax_tables
from folha.fopag.commission import (
    calc_commission_detail,
    orders_in_competence,
    validate_role,
)
from folha.fopag.payroll import PayrollInputs, build_payroll
from folha.logging_config import log
from folha.models import Employee, Role, SalesOrder
from folha.shared.errors import InputError, NotFoundError
from folha.store import DataStore, get_store

router = APIRouter(prefix="/api/v1/fopag", tags=["FOPAG - Folha Mensal"])

# --- MODELOS ---


# Cálculo com os dados enviados pela tela (nada é buscado no store)
class FolhaCalculoRequest(BaseModel):
    employee: Employee
    competence: str
    inputs: PayrollInputs = Field(default_factory=PayrollInputs)


class ComissaoRequest(BaseModel):
    role: Role
    orders: List[SalesOrder] = Field(default_factory=list)
    employee_id: Optional[str] = None
    competence: Optional[str] = None
    require_finalized_only: bool = True


# Geração a partir do store (com gravação opcional)
class FolhaGerarRequest(BaseModel):
    employee_id: str
    competence: str
    persist: bool = False
    bonus: float = 0
    other_credits: float = 0
    other_debits: float = 0
    period_start_date: Optional[date] = None
    worked_days: int = 0


class FolhaLoteRequest(BaseModel):
    competence: str
    persist: bool = False


# --- ENDPOINTS ---


@router.get("/tabelas")
async def listar_tabelas():
    """Versões e faixas das tabelas de INSS e IRRF carregadas."""
    resposta = {}
    for kind in (tax_tables.INSS, tax_tables.IRRF):
        resposta[kind] = {}
        for versao in tax_tables.available_versions(kind):
            tabela = tax_tables.get_table(kind, versao).table
            resposta[kind][versao] = {
                "brackets": [
                    {
                        "upto": None if faixa.is_open else float(faixa.upto),
                        "rate": float(faixa.rate),
                        "deduction": float(faixa.deduction),
                    }
                    for faixa in tabela.brackets
                ],
                "ceiling": float(tabela.ceiling) if tabela.ceiling is not None else None,
                "per_dependent": float(tabela.per_dependent),
            }
    return resposta


@router.post("/calcular")
async def calcular_folha(request: FolhaCalculoRequest):
    try:
        return build_payroll(request.employee, request.competence, request.inputs)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/comissao")
async def calcular_comissao(request: ComissaoRequest):
    orders = request.orders
    try:
        if request.competence:
            orders = orders_in_competence(orders, request.competence)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    detalhe = calc_commission_detail(
        request.role, orders, request.employee_id, request.require_finalized_only
    )
    erros = validate_role(request.role)
    return {
        "valid": not erros,
        "errors": erros,
        "value": float(detalhe.value),
        "sales_base": float(detalhe.sales_base),
        "threshold": float(detalhe.threshold),
        "threshold_met": detalhe.threshold_met,
        "applicable": detalhe.applicable,
    }


@router.post("/gerar")
async def gerar_folha(request: FolhaGerarRequest, store: DataStore = Depends(get_store)):
    try:
        return runner.run_folha_mensal(
            store,
            request.employee_id,
            request.competence,
            persist=request.persist,
            bonus=request.bonus,
            other_credits=request.other_credits,
            other_debits=request.other_debits,
            period_start_date=request.period_start_date,
            worked_days=request.worked_days,
        )
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/gerar/lote")
async def gerar_folha_lote(request: FolhaLoteRequest, store: DataStore = Depends(get_store)):
    log.info(f"[Router] Folha em lote {request.competence} (persist={request.persist})")
    try:
        df = runner.gerar_folha_lote(store, request.competence, persist=request.persist)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"total": len(df), "folhas": runner.resumo_para_registros(df)}
