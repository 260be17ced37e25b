# folha/fopag/tax_tables.py

"""
Catálogo das tabelas progressivas de INSS e IRRF, versionadas por ano fiscal.

O motor de cálculo (calculations.py) nunca lê este arquivo diretamente: ele
recebe a tabela como parâmetro. Aqui ficam:
1. As tabelas publicadas conhecidas (2024 e 2025).
2. A busca por versão, com fallback para a versão mais recente e aviso.
3. A carga de novas versões a partir de um JSON (TAX_TABLES_FILE), para
   incluir um novo ano sem tocar na lógica de cálculo.

Formato do JSON:
    {"inss": {"2026": {"brackets": [[1600.0, 0.075, 0.0], ...], "ceiling": 1000.0}},
     "irrf": {"2026": {"brackets": [[2500.0, 0, 0], ..., [null, 0.275, 950.0]],
                       "per_dependent": 189.59}}}
Limite `null` marca a última faixa (sem teto).
"""

import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Dict, Optional, Tuple

from folha.config import settings
from folha.logging_config import log

INFINITO = Decimal("Infinity")

INSS = "inss"
IRRF = "irrf"


@dataclass(frozen=True)
class Bracket:
    """Faixa progressiva: até `upto` (inclusive) aplica `base * rate - deduction`."""

    upto: Decimal
    rate: Decimal
    deduction: Decimal = Decimal("0")

    @property
    def is_open(self) -> bool:
        return self.upto == INFINITO


@dataclass(frozen=True)
class BracketTable:
    version: str
    kind: str
    brackets: Tuple[Bracket, ...]
    # Teto de contribuição (INSS). None = sem teto.
    ceiling: Optional[Decimal] = None
    # Dedução por dependente (IRRF). Zero para tabelas de INSS.
    per_dependent: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        if not self.brackets:
            raise ValueError(f"Tabela {self.kind}/{self.version} sem faixas")
        limites = [b.upto for b in self.brackets]
        if limites != sorted(limites):
            raise ValueError(f"Faixas fora de ordem na tabela {self.kind}/{self.version}")
        for faixa in self.brackets:
            if faixa.rate < 0 or faixa.deduction < 0:
                raise ValueError(
                    f"Alíquota/dedução negativa na tabela {self.kind}/{self.version}"
                )


@dataclass(frozen=True)
class TableLookup:
    table: BracketTable
    requested_version: str
    fallback_used: bool = False


def _faixas(*linhas) -> Tuple[Bracket, ...]:
    return tuple(
        Bracket(
            upto=INFINITO if limite is None else Decimal(str(limite)),
            rate=Decimal(str(aliquota)),
            deduction=Decimal(str(deducao)),
        )
        for limite, aliquota, deducao in linhas
    )


# --- TABELAS CONHECIDAS ---
# Formato: (limite_da_faixa, aliquota, deducao_da_parcela)

INSS_TABLES: Dict[str, BracketTable] = {
    "2024": BracketTable(
        version="2024",
        kind=INSS,
        brackets=_faixas(
            (1412.00, 0.075, 0.0),
            (2666.68, 0.09, 21.18),
            (4000.03, 0.12, 101.18),
            (7786.02, 0.14, 181.18),
        ),
        ceiling=Decimal("908.86"),
    ),
    "2025": BracketTable(
        version="2025",
        kind=INSS,
        brackets=_faixas(
            (1518.00, 0.075, 0.0),
            (2793.88, 0.09, 22.77),
            (4190.83, 0.12, 106.59),
            (8157.41, 0.14, 190.40),
        ),
        ceiling=Decimal("951.63"),
    ),
}

IRRF_TABLES: Dict[str, BracketTable] = {
    "2024": BracketTable(
        version="2024",
        kind=IRRF,
        brackets=_faixas(
            (2259.20, 0.0, 0.0),  # Isento
            (2826.65, 0.075, 169.44),
            (3751.05, 0.15, 381.44),
            (4664.68, 0.225, 662.77),
            (None, 0.275, 896.00),
        ),
        per_dependent=Decimal("189.59"),
    ),
    "2025": BracketTable(
        version="2025",
        kind=IRRF,
        brackets=_faixas(
            (2428.80, 0.0, 0.0),  # Isento
            (2826.66, 0.075, 182.16),
            (3751.06, 0.15, 394.16),
            (4664.68, 0.225, 675.49),
            (None, 0.275, 908.73),
        ),
        per_dependent=Decimal("189.59"),
    ),
}

_CATALOG: Dict[str, Dict[str, BracketTable]] = {INSS: INSS_TABLES, IRRF: IRRF_TABLES}


def available_versions(kind: str) -> Tuple[str, ...]:
    return tuple(sorted(_catalogo(kind)))


def latest_version(kind: str) -> str:
    return available_versions(kind)[-1]


def has_version(kind: str, version: Optional[str]) -> bool:
    return version is not None and str(version) in _catalogo(kind)


def get_table(kind: str, version: Optional[str]) -> TableLookup:
    """
    Busca a tabela do ano pedido. Se a versão não existir, usa a mais recente
    e marca `fallback_used` para o chamador emitir o aviso.
    """
    tabelas = _catalogo(kind)
    pedida = str(version) if version is not None else ""
    if pedida in tabelas:
        return TableLookup(table=tabelas[pedida], requested_version=pedida)

    recente = latest_version(kind)
    log.warning(
        f"Tabela {kind.upper()} '{pedida or '-'}' indisponível. Usando a versão {recente}."
    )
    return TableLookup(table=tabelas[recente], requested_version=pedida, fallback_used=True)


def register_table(table: BracketTable) -> None:
    _catalogo(table.kind)[table.version] = table
    log.info(f"Tabela {table.kind.upper()} {table.version} registrada.")


def table_from_dict(kind: str, version: str, data: dict) -> BracketTable:
    ceiling = data.get("ceiling")
    return BracketTable(
        version=str(version),
        kind=kind,
        brackets=_faixas(*[tuple(linha) for linha in data["brackets"]]),
        ceiling=Decimal(str(ceiling)) if ceiling is not None else None,
        per_dependent=Decimal(str(data.get("per_dependent", 0))),
    )


def load_tables(path: str) -> int:
    """Registra as tabelas de um arquivo JSON. Retorna quantas foram carregadas."""
    conteudo = json.loads(Path(path).read_text(encoding="utf-8"))
    total = 0
    for kind in (INSS, IRRF):
        for version, data in conteudo.get(kind, {}).items():
            register_table(table_from_dict(kind, version, data))
            total += 1
    log.success(f"{total} tabela(s) carregada(s) de {path}.")
    return total


def _catalogo(kind: str) -> Dict[str, BracketTable]:
    try:
        return _CATALOG[kind]
    except KeyError:
        raise ValueError(f"Tipo de tabela desconhecido: {kind!r}") from None


# Versões extras configuradas por arquivo (novos anos fiscais).
if settings.TAX_TABLES_FILE:
    load_tables(settings.TAX_TABLES_FILE)
