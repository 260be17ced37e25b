# folha/folha13/medias.py

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from folha.config import Settings, settings
from folha.logging_config import log
from folha.models import MonthlyPayroll
from folha.shared.errors import Issue, config_fallback
from folha.shared.utils import ZERO, arredondar, competencia_de, safe_decimal

PERIODO_JANELA = "janela"
PERIODO_MESES_TRABALHADOS = "meses_trabalhados"
PERIODO_12_MESES = "12_meses"
PERIODOS_VALIDOS = (PERIODO_JANELA, PERIODO_MESES_TRABALHADOS, PERIODO_12_MESES)


@dataclass
class MediasResult:
    average_overtime: Decimal = ZERO
    average_commissions: Decimal = ZERO
    average_other: Decimal = ZERO
    divisor: int = 0
    description: str = ""
    # Competência -> valores somados no mês
    details: Dict[str, Dict[str, float]] = field(default_factory=dict)
    warnings: List[Issue] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return self.average_overtime + self.average_commissions + self.average_other


def trailing_competences(year: int, reference_month: int = 12, months: int = 12) -> List[str]:
    """Competências da janela que termina em year-reference_month (ordem cronológica)."""
    competencias = []
    ano, mes = int(year), int(reference_month)
    for _ in range(max(0, months)):
        competencias.append(competencia_de(ano, mes))
        mes -= 1
        if mes == 0:
            ano, mes = ano - 1, 12
    return list(reversed(competencias))


def calc_medias(
    payrolls: Iterable[MonthlyPayroll],
    employee_id: Optional[str],
    year: int,
    effective_twelfths: int,
    reference_month: int = 12,
    config: Optional[Settings] = None,
) -> MediasResult:
    """
    Médias das verbas variáveis (horas extras, comissões, outras entradas e,
    se configurado, bônus) nas folhas da janela móvel do funcionário.
    """
    config = config or settings
    avisos: List[Issue] = []
    janela = max(1, int(config.JANELA_MEDIAS_MESES))
    competencias = set(trailing_competences(year, reference_month, janela))

    total_he = total_comissoes = total_outros = ZERO
    detalhes: Dict[str, Dict[str, float]] = {}
    for folha in payrolls:
        if folha.employee_id != employee_id or folha.competence not in competencias:
            continue
        he = folha.overtime_value if config.INCLUIR_HORAS_EXTRAS_MEDIA else ZERO
        comissoes = folha.commissions if config.INCLUIR_COMISSOES_MEDIA else ZERO
        outros = folha.other_credits if config.INCLUIR_ADICIONAIS_MEDIA else ZERO
        if config.INCLUIR_BONUS_MEDIA:
            outros += folha.bonus

        total_he += he
        total_comissoes += comissoes
        total_outros += outros

        mes = detalhes.setdefault(
            folha.competence, {"horas_extras": 0.0, "comissoes": 0.0, "outros": 0.0}
        )
        mes["horas_extras"] += float(he)
        mes["comissoes"] += float(comissoes)
        mes["outros"] += float(outros)

    periodo = config.PERIODO_CALCULO_MEDIAS
    if periodo not in PERIODOS_VALIDOS:
        avisos.append(
            config_fallback(
                f"Período de médias '{periodo}' desconhecido; usando '{PERIODO_JANELA}'"
            )
        )
        periodo = PERIODO_JANELA

    if periodo == PERIODO_MESES_TRABALHADOS:
        divisor = effective_twelfths or janela
        descricao = f"Meses trabalhados ({divisor} meses)"
    elif periodo == PERIODO_12_MESES:
        divisor = 12
        descricao = "12 meses (fixo)"
    else:
        divisor = janela
        descricao = f"Janela de {janela} meses até {competencia_de(year, reference_month)}"

    fator = safe_decimal(config.PERCENTUAL_MEDIAS) / 100
    resultado = MediasResult(
        average_overtime=arredondar(total_he / divisor * fator),
        average_commissions=arredondar(total_comissoes / divisor * fator),
        average_other=arredondar(total_outros / divisor * fator),
        divisor=divisor,
        description=descricao,
        details=dict(sorted(detalhes.items())),
        warnings=avisos,
    )
    log.debug(
        f"[Médias] {employee_id} {year}: HE R$ {resultado.average_overtime}, "
        f"comissões R$ {resultado.average_commissions}, outros R$ {resultado.average_other} "
        f"({descricao})"
    )
    return resultado
