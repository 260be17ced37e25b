# folha/fopag/calculations.py

"""
Motor de faixas progressivas: INSS (contribuição social) e IRRF (imposto de
renda retido na fonte).

A tabela é sempre recebida como parâmetro (ver tax_tables.py); nada aqui sabe
de ano fiscal.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from folha.fopag.tax_tables import Bracket, BracketTable
from folha.logging_config import log
from folha.shared.utils import ZERO, arredondar, safe_decimal, safe_int

FAIXA_ISENTO = "Isento"
FAIXA_NAO_APLICAVEL = "N/A"


@dataclass(frozen=True)
class WithholdingResult:
    value: Decimal
    base_used: Decimal
    bracket_label: str
    dependent_deduction: Decimal = ZERO
    rate: Decimal = ZERO
    capped: bool = False


NAO_APLICAVEL = WithholdingResult(
    value=ZERO, base_used=ZERO, bracket_label=FAIXA_NAO_APLICAVEL
)


def _faixa_da_base(base: Decimal, table: BracketTable) -> Optional[Bracket]:
    for faixa in table.brackets:
        if base <= faixa.upto:
            return faixa
    return None


def _rotulo(faixa: Bracket) -> str:
    if faixa.rate == 0:
        return FAIXA_ISENTO
    return f"{faixa.rate * 100:.1f}%"


def calc_withholding(base: Any, table: BracketTable, dependents: Any = 0) -> WithholdingResult:
    """
    Calcula a retenção progressiva: (Base * Alíquota) - Dedução da faixa.

    Para tabelas com dedução por dependente (IRRF), a dedução total é
    subtraída da base antes de encontrar a faixa. O valor nunca é negativo e
    nunca passa do teto da tabela, quando houver.
    """
    base = safe_decimal(base)
    dependentes = max(0, safe_int(dependents))
    deducao_dependentes = arredondar(table.per_dependent * dependentes)
    base_real = arredondar(max(ZERO, base - deducao_dependentes))

    if base_real <= 0:
        return WithholdingResult(
            value=ZERO,
            base_used=base_real,
            bracket_label=FAIXA_ISENTO,
            dependent_deduction=deducao_dependentes,
        )

    faixa = _faixa_da_base(base_real, table)
    if faixa is None:
        # Acima da última faixa com limite: teto, ou a última faixa se não houver teto.
        faixa = table.brackets[-1]
        calculado = table.ceiling if table.ceiling is not None else (
            base_real * faixa.rate - faixa.deduction
        )
    else:
        calculado = base_real * faixa.rate - faixa.deduction

    capped = table.ceiling is not None and calculado >= table.ceiling
    if capped:
        calculado = table.ceiling

    valor = arredondar(max(ZERO, calculado))
    rotulo = f"Teto: R$ {table.ceiling:.2f}" if capped else _rotulo(faixa)

    log.debug(
        f"[Cálculo] {table.kind.upper()} {table.version}: Base R$ {base_real}, "
        f"Faixa {rotulo}, Calculado R$ {valor}"
    )
    return WithholdingResult(
        value=valor,
        base_used=base_real,
        bracket_label=rotulo,
        dependent_deduction=deducao_dependentes,
        rate=faixa.rate,
        capped=capped,
    )


def calc_inss(base_inss: Any, table: BracketTable) -> WithholdingResult:
    """INSS sobre a base bruta (sem dependentes)."""
    return calc_withholding(base_inss, table, 0)


def calc_irrf(base_bruta_irrf: Any, table: BracketTable, dependentes: Any = 0) -> WithholdingResult:
    """
    IRRF sobre a base já líquida de INSS. A dedução por dependentes é aplicada
    dentro de calc_withholding.
    """
    return calc_withholding(base_bruta_irrf, table, dependentes)
