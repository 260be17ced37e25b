# folha/store.py

"""
Acesso às coleções do ERP (funcionários, cargos, ponto, OS, adiantamentos,
folhas). O motor só enxerga o protocolo DataStore; o InMemoryStore atende os
testes, o processamento em lote local e a API de demonstração.
"""

import copy
import json
import uuid
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from folha.config import settings
from folha.logging_config import log
from folha.shared.errors import NotFoundError

# --- NOMES DAS COLEÇÕES (como no ERP) ---
FUNCIONARIOS = "funcionarios"
CARGOS = "cargos"
CONTROLE_PONTO = "controle_ponto"
AFASTAMENTOS = "afastamentos"
ORDENS_SERVICO = "ordens_servico"
ADIANTAMENTOS = "adiantamentos"
FOLHAS_PAGAMENTO = "folhas_pagamento"
FOLHAS_13 = "folha13"

Registro = Dict[str, Any]


class DataStore(Protocol):
    def list(self, collection: str) -> List[Registro]:
        ...

    def filter(self, collection: str, **criteria: Any) -> List[Registro]:
        ...

    def get(self, collection: str, record_id: str) -> Optional[Registro]:
        ...

    def create(self, collection: str, data: Registro) -> Registro:
        ...

    def update(self, collection: str, record_id: str, data: Registro) -> Registro:
        ...


class InMemoryStore:
    """Store em memória. Devolve cópias: quem lê não altera o que está gravado."""

    def __init__(self, collections: Optional[Dict[str, List[Registro]]] = None):
        self._colecoes: Dict[str, List[Registro]] = {}
        for nome, registros in (collections or {}).items():
            for registro in registros:
                self.create(nome, registro)

    @classmethod
    def from_json(cls, path: str) -> "InMemoryStore":
        conteudo = json.loads(Path(path).read_text(encoding="utf-8"))
        store = cls(conteudo)
        total = sum(len(v) for v in conteudo.values())
        log.success(f"Store carregado de {path}: {total} registro(s).")
        return store

    def list(self, collection: str) -> List[Registro]:
        return copy.deepcopy(self._colecoes.get(collection, []))

    def filter(self, collection: str, **criteria: Any) -> List[Registro]:
        return [
            copy.deepcopy(registro)
            for registro in self._colecoes.get(collection, [])
            if all(registro.get(campo) == valor for campo, valor in criteria.items())
        ]

    def get(self, collection: str, record_id: str) -> Optional[Registro]:
        for registro in self._colecoes.get(collection, []):
            if registro.get("id") == record_id:
                return copy.deepcopy(registro)
        return None

    def create(self, collection: str, data: Registro) -> Registro:
        registro = copy.deepcopy(data)
        if not registro.get("id"):
            registro["id"] = uuid.uuid4().hex
        self._colecoes.setdefault(collection, []).append(registro)
        log.debug(f"[Store] {collection}: criado {registro['id']}")
        return copy.deepcopy(registro)

    def update(self, collection: str, record_id: str, data: Registro) -> Registro:
        for registro in self._colecoes.get(collection, []):
            if registro.get("id") == record_id:
                registro.update(copy.deepcopy(data))
                registro["id"] = record_id
                log.debug(f"[Store] {collection}: atualizado {record_id}")
                return copy.deepcopy(registro)
        raise NotFoundError(f"Registro '{record_id}' não encontrado em {collection}")


@lru_cache()
def get_store() -> InMemoryStore:
    """Store compartilhado da API (semeado por DATA_FILE, quando configurado)."""
    if settings.DATA_FILE:
        return InMemoryStore.from_json(settings.DATA_FILE)
    return InMemoryStore()
