# tests/conftest.py

import pytest

from folha.config import Settings
from folha.store import InMemoryStore


@pytest.fixture
def config():
    # Valores padrão, sem ler o .env da máquina
    return Settings(_env_file=None)


@pytest.fixture
def store():
    return InMemoryStore(
        {
            "funcionarios": [
                {
                    "id": "f1",
                    "nome": "Ana Souza",
                    "salario": 3000.0,
                    "cargo_id": "c1",
                    "data_inicio": "2020-01-01",
                    "status": "ativo",
                },
                {
                    "id": "f2",
                    "nome": "Bruno Lima",
                    "salario": 2200.0,
                    "cargo_id": None,
                    "data_inicio": "2019-05-01",
                    "data_demissao": "2025-06-10",
                    "status": "demitido",
                },
                {
                    "id": "f3",
                    "nome": "Carla Dias",
                    "salario": 2500.0,
                    "cargo_id": "c2",
                    "data_inicio": "2021-03-01",
                    "status": "ativo",
                },
            ],
            "cargos": [
                {
                    "id": "c1",
                    "nome": "Consultor de serviços",
                    "tem_comissao": True,
                    "tipo_comissao": "individual",
                    "percentual_comissao": 10,
                    "meta_minima_individual": 1000,
                    "base_calculo_comissao": "excedente",
                },
                {
                    "id": "c2",
                    "nome": "Gerente",
                    "tem_comissao": True,
                    "tipo_comissao": "empresa",
                    "percentual_comissao": 150,
                    "meta_minima_empresa": 0,
                    "base_calculo_comissao": "total",
                },
            ],
            "ordens_servico": [
                {
                    "id": "os1",
                    "data_conclusao": "2025-11-05",
                    "status": "finalizado",
                    "vendedor_id": "f1",
                    "valor_total": 1200.0,
                },
                {
                    "id": "os2",
                    "data_conclusao": "2025-11-06",
                    "status": "em_andamento",
                    "vendedor_id": "f1",
                    "valor_total": 500.0,
                },
            ],
            "controle_ponto": [
                {
                    "funcionario_id": "f1",
                    "mes_referencia": "2025-11",
                    "horas_extras_semana": 10,
                    "horas_extras_fds": 0,
                    "faltas_dias": 0,
                    "faltas_horas": 0,
                }
            ],
            "adiantamentos": [
                {
                    "funcionario_id": "f1",
                    "competencia": "2025-11",
                    "valor": 500.0,
                    "status": "pago",
                },
                {
                    "funcionario_id": "f1",
                    "competencia": "2025-11",
                    "valor": 300.0,
                    "status": "pendente",
                },
            ],
        }
    )
