# folha/folha13/router.py

from datetime import date
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from folha import runner
from folha.folha13.calculator import Folha13Result, calc_folha13
from folha.folha13.validation import validate_folha13
from folha.logging_config import log
from folha.models import (
    AnnualBonusRecord,
    AttendanceRecord,
    Employee,
    LeaveRecord,
    MonthlyPayroll,
    Role,
)
from folha.shared.errors import InputError, NotFoundError
from folha.store import DataStore, get_store

router = APIRouter(prefix="/api/v1/folha13", tags=["Folha 13 - 13º Salário"])

# --- MODELOS ---


class Folha13CalculoRequest(BaseModel):
    employee: Employee
    year: int
    installment: str
    attendance: List[AttendanceRecord] = Field(default_factory=list)
    leaves: List[LeaveRecord] = Field(default_factory=list)
    payrolls: List[MonthlyPayroll] = Field(default_factory=list)
    # Sem tipo fixo: valor fora da faixa volta como erro, não como 422.
    edited_twelfths: Optional[Any] = None
    other_deductions: float = 0
    other_deductions_description: Optional[str] = None
    table_version: Optional[str] = None
    payment_date: Optional[date] = None


class Folha13ValidarRequest(BaseModel):
    record: AnnualBonusRecord
    employee: Optional[Employee] = None
    role: Optional[Role] = None


class Folha13GerarRequest(BaseModel):
    employee_id: str
    year: int
    installment: str
    edited_twelfths: Optional[Any] = None
    other_deductions: float = 0
    other_deductions_description: Optional[str] = None
    table_version: Optional[str] = None
    payment_date: Optional[date] = None
    persist: bool = False


class Folha13LoteRequest(BaseModel):
    year: int
    installment: str
    table_version: Optional[str] = None
    persist: bool = False


def _resposta(resultado: Folha13Result) -> dict:
    return {
        "valid": not resultado.errors,
        "record": resultado.record,
        "errors": resultado.errors,
        "warnings": resultado.warnings,
    }


# --- ENDPOINTS ---


@router.post("/calcular")
async def calcular_folha13(request: Folha13CalculoRequest):
    try:
        resultado = calc_folha13(
            request.employee,
            request.year,
            request.installment,
            attendance=request.attendance,
            leaves=request.leaves,
            payrolls=request.payrolls,
            edited_twelfths=request.edited_twelfths,
            other_deductions=request.other_deductions,
            other_deductions_description=request.other_deductions_description,
            table_version=request.table_version,
            payment_date=request.payment_date,
        )
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _resposta(resultado)


@router.post("/validar")
async def validar_folha13(request: Folha13ValidarRequest):
    validacao = validate_folha13(request.record, request.employee, role=request.role)
    return {
        "valid": validacao.valid,
        "errors": validacao.errors,
        "warnings": validacao.warnings,
    }


@router.post("/gerar")
async def gerar_folha13(request: Folha13GerarRequest, store: DataStore = Depends(get_store)):
    try:
        resultado = runner.run_folha13(
            store,
            request.employee_id,
            request.year,
            request.installment,
            edited_twelfths=request.edited_twelfths,
            other_deductions=request.other_deductions,
            other_deductions_description=request.other_deductions_description,
            table_version=request.table_version,
            payment_date=request.payment_date,
            persist=request.persist,
        )
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _resposta(resultado)


@router.post("/gerar/lote")
async def gerar_folha13_lote(
    request: Folha13LoteRequest, store: DataStore = Depends(get_store)
):
    log.info(
        f"[Router] 13º em lote {request.year} {request.installment} (persist={request.persist})"
    )
    df = runner.gerar_folha13_lote(
        store,
        request.year,
        request.installment,
        persist=request.persist,
        table_version=request.table_version,
    )
    return {"total": len(df), "folhas": runner.resumo_para_registros(df)}
