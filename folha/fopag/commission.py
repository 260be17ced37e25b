# folha/fopag/commission.py

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from folha.logging_config import log
from folha.models import (
    STATUS_OS_FINALIZADA,
    BaseCalculoComissao,
    Role,
    SalesOrder,
    TipoComissao,
)
from folha.shared.errors import Issue, range_error
from folha.shared.utils import ZERO, arredondar, parse_competencia


@dataclass(frozen=True)
class CommissionDetail:
    value: Decimal
    sales_base: Decimal = ZERO
    threshold: Decimal = ZERO
    threshold_met: bool = False
    applicable: bool = False


SEM_COMISSAO = CommissionDetail(value=ZERO)


def orders_in_competence(orders: Iterable[SalesOrder], competencia: str) -> List[SalesOrder]:
    """OS concluídas dentro do mês da competência (OS sem data ficam de fora)."""
    ano, mes = parse_competencia(competencia)
    return [
        ordem
        for ordem in orders
        if ordem.completion_date is not None
        and ordem.completion_date.year == ano
        and ordem.completion_date.month == mes
    ]


def validate_role(role: Optional[Role]) -> List[Issue]:
    """Faixas da comissão do cargo: percentual 0-100 e metas não negativas."""
    if role is None or not role.commission_enabled:
        return []
    erros = []
    if not 0 <= role.commission_percent <= 100:
        erros.append(
            range_error(
                f"Percentual de comissão fora da faixa 0-100: {role.commission_percent}"
            )
        )
    if role.minimum_threshold_individual < 0:
        erros.append(range_error("Meta mínima individual não pode ser negativa"))
    if role.minimum_threshold_company < 0:
        erros.append(range_error("Meta mínima da empresa não pode ser negativa"))
    return erros


def calc_commission_detail(
    role: Optional[Role],
    orders: Iterable[SalesOrder],
    employee_id: Optional[str],
    require_finalized_only: bool = True,
) -> CommissionDetail:
    if role is None or not role.commission_enabled or role.commission_percent <= 0:
        return SEM_COMISSAO

    os_para_comissao = [
        ordem
        for ordem in orders
        if not require_finalized_only or ordem.status == STATUS_OS_FINALIZADA
    ]

    if role.commission_type == TipoComissao.INDIVIDUAL:
        vendas = sum(
            (o.total_value for o in os_para_comissao if o.seller_id == employee_id), ZERO
        )
        meta = role.minimum_threshold_individual
    else:
        # Comissão sobre o total vendido pela empresa (todos os vendedores)
        vendas = sum((ordem.total_value for ordem in os_para_comissao), ZERO)
        meta = role.minimum_threshold_company

    if vendas < meta:
        log.debug(f"[Comissão] Meta não atingida: vendas R$ {vendas} < meta R$ {meta}")
        return CommissionDetail(
            value=ZERO, sales_base=vendas, threshold=meta, threshold_met=False, applicable=True
        )

    percentual = role.commission_percent
    # Meta zero com base "excedente" equivale à base total.
    if role.commission_base == BaseCalculoComissao.EXCEDENTE and meta > 0:
        comissao = (vendas - meta) * percentual / 100
    else:
        comissao = vendas * percentual / 100

    valor = arredondar(comissao)
    log.debug(
        f"[Comissão] {role.commission_type.value}/{role.commission_base.value}: "
        f"vendas R$ {vendas}, meta R$ {meta}, {percentual}% = R$ {valor}"
    )
    return CommissionDetail(
        value=valor, sales_base=vendas, threshold=meta, threshold_met=True, applicable=True
    )


def calc_commission(
    role: Optional[Role],
    orders: Iterable[SalesOrder],
    employee_id: Optional[str],
    require_finalized_only: bool = True,
) -> Decimal:
    return calc_commission_detail(role, orders, employee_id, require_finalized_only).value
