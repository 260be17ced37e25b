import calendar
import math
import re
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Optional, Tuple

from folha.shared.errors import InputError

CENTAVOS = Decimal("0.01")
ZERO = Decimal("0.00")

_COMPETENCIA_RE = re.compile(r"^(\d{4})-(\d{2})$")


def _normalizar_numero(texto: str) -> str:
    """'1.234,56' / '1,234.56' / '1234,56' -> '1234.56'. O último separador é o decimal."""
    texto = texto.strip().replace("R$", "").replace(" ", "")
    if "," in texto and "." in texto:
        if texto.rfind(",") > texto.rfind("."):
            return texto.replace(".", "").replace(",", ".")
        return texto.replace(",", "")
    if texto.count(".") > 1:
        return texto.replace(".", "")
    return texto.replace(",", ".")


def safe_decimal(value: Any) -> Decimal:
    """Converte qualquer entrada (registro sujo do store) para Decimal finito.

    None, NaN, infinito, booleanos e textos inválidos viram 0. É a única
    porta de entrada numérica do motor: nada chega aos cálculos como NaN.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return Decimal("0")
        return Decimal(str(value))
    if isinstance(value, str):
        cleaned = _normalizar_numero(value)
        if not cleaned:
            return Decimal("0")
        try:
            parsed = Decimal(cleaned)
        except InvalidOperation:
            return Decimal("0")
        return parsed if parsed.is_finite() else Decimal("0")
    # numpy / pandas escalares
    try:
        as_float = float(value)
    except (TypeError, ValueError):
        return Decimal("0")
    return safe_decimal(as_float)


def safe_int(value: Any) -> int:
    return int(safe_decimal(value).to_integral_value(rounding=ROUND_HALF_UP))


def arredondar(valor: Any) -> Decimal:
    """Arredonda para centavos (meio para cima)."""
    return safe_decimal(valor).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def parse_competencia(competencia: Optional[str]) -> Tuple[int, int]:
    """'2025-11' -> (2025, 11). Competência ausente ou inválida é InputError."""
    if not competencia:
        raise InputError("Competência não informada")
    match = _COMPETENCIA_RE.match(str(competencia).strip())
    if not match:
        raise InputError(f"Competência inválida: {competencia!r} (esperado AAAA-MM)")
    ano, mes = int(match.group(1)), int(match.group(2))
    if not 1 <= mes <= 12:
        raise InputError(f"Mês inválido na competência: {competencia!r}")
    return ano, mes


def competencia_de(ano: int, mes: int) -> str:
    return f"{ano}-{mes:02d}"


def get_total_dias_mes(ano: int, mes: int) -> int:
    return calendar.monthrange(ano, mes)[1]


def parse_data(value: Any) -> Optional[date]:
    """Aceita date, datetime ou texto ISO ('2025-11-20' ou com horário)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()
    except ValueError:
        return None
