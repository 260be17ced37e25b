from dataclasses import dataclass
from enum import Enum


class FolhaError(Exception):
    """Erro base do motor de folha."""


class InputError(FolhaError, ValueError):
    """Identificador obrigatório ausente (funcionário, competência, ano)."""


class NotFoundError(FolhaError, LookupError):
    """Registro inexistente no store."""


class IssueKind(str, Enum):
    RANGE_ERROR = "range_error"
    POLICY_WARNING = "policy_warning"
    CONFIG_FALLBACK = "config_fallback"


@dataclass(frozen=True)
class Issue:
    """Erro de faixa ou aviso devolvido junto do resultado (nunca lançado)."""

    kind: IssueKind
    message: str

    def __str__(self) -> str:
        return self.message


def range_error(message: str) -> Issue:
    return Issue(IssueKind.RANGE_ERROR, message)


def policy_warning(message: str) -> Issue:
    return Issue(IssueKind.POLICY_WARNING, message)


def config_fallback(message: str) -> Issue:
    return Issue(IssueKind.CONFIG_FALLBACK, message)
